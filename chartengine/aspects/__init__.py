from .engine import MAJOR_ASPECTS, Aspect, AspectEngine, angular_sep_deg, group_aspect_sets

__all__ = ["MAJOR_ASPECTS", "Aspect", "AspectEngine", "angular_sep_deg", "group_aspect_sets"]
