from .cashbox import CashboxCog
from .export import ExportCog
from .general import GeneralCog
from .reports import ReportsCog

__all__ = [
    "CashboxCog",
    "ExportCog",
    "GeneralCog",
    "ReportsCog",
]
