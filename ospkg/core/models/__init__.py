from ospkg.core.models.results import BatchReport, ModuleResult

__all__ = ["BatchReport", "ModuleResult"]
