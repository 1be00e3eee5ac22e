"""Fixed names shared by the encoder and decoder."""

META_SECTION_NAME = "__META__"
META_TREE_SECTION_NAME = "tree"
META_CONFIG_SECTION_NAME = "config_file"

ARTIFACT_FIELD_NAME = "code"

BUILD_CONFIG_FILE_NAME = ".build"
IGNORE_FILE_NAME = ".hcignore"
DEFAULT_BUNDLE_FILE_NAME = "bundle.json"

CONFIG_FILE_SUFFIX = ".json"
BINARY_FILE_EXTENSION = ".wasm"
