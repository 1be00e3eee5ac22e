from .file_tree import TreeScanner, classify, count_nodes, list_children, load_config_fields, select_config_file

__all__ = [
    "TreeScanner",
    "classify",
    "count_nodes",
    "list_children",
    "load_config_fields",
    "select_config_file",
]
