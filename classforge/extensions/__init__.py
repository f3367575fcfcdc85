"""
Built-in extensions.
"""

from .skeleton import SkeletonExtension
from .template_members import TemplateMembersExtension

__all__ = ["SkeletonExtension", "TemplateMembersExtension"]
