from .export_data import ExportPipeline, run_export
from .load_data import LoadPipeline, run_load
from .transform_data import TransformPipeline, run_transform
from .disperse_data import DispersePipeline, run_disperse

__all__ = [
    "ExportPipeline",
    "LoadPipeline",
    "TransformPipeline",
    "DispersePipeline",
    "run_export",
    "run_load",
    "run_transform",
    "run_disperse",
]
