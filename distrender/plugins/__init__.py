from .template import PendingReplace, TemplatePlugin

__all__ = ["PendingReplace", "TemplatePlugin"]
