from ballot_client.utils.formatters import (
    console,
    format_address,
    save_json_output,
    view_to_dict,
)

__all__ = [
    "console",
    "format_address",
    "save_json_output",
    "view_to_dict",
]
