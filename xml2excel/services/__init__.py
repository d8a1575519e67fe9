from .converter import ConvertOptions, convert_file, flatten_file, unflatten_file
from .orchestrator import ProcessingError, process_all, process_path, scan_source_files
from .summary import render_summary_line
from .watcher import DirectoryWatcher, PathEvent, SettleQueueConsumer, watch

__all__ = [
    "ConvertOptions",
    "convert_file",
    "flatten_file",
    "unflatten_file",
    "ProcessingError",
    "process_all",
    "process_path",
    "scan_source_files",
    "render_summary_line",
    "DirectoryWatcher",
    "PathEvent",
    "SettleQueueConsumer",
    "watch",
]
