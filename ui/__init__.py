"""UI layer -- Rich dashboard and output formatters."""

from .dashboard import (
    console,
    print_connectivity_change,
    print_header,
    print_history,
    print_snapshot,
)
from .output import (
    append_csv,
    create_result_json,
    format_csv_header,
    format_csv_row,
    format_text_result,
    save_json,
)

__all__ = [
    "append_csv",
    "console",
    "create_result_json",
    "format_csv_header",
    "format_csv_row",
    "format_text_result",
    "print_connectivity_change",
    "print_header",
    "print_history",
    "print_snapshot",
    "save_json",
]
