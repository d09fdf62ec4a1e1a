"""Constants for the configuration plugin."""

from typing import Final


# Identifier the host framework registers this plugin under
PLUGIN_NAME: Final = "config"

# Log component names
COMPONENT_CONFIG: Final = "config"
COMPONENT_STORE: Final = "config_store"

# Operation tags carried by errors
OP_INIT: Final = "config plugin init"
OP_UNMARSHAL_KEY: Final = "config plugin unmarshal key"
OP_UNMARSHAL: Final = "config plugin unmarshal"

# Separator between prefix and key in environment variable names
ENV_SEPARATOR: Final = "_"

# Characters in a dotted key replaced by ENV_SEPARATOR
ENV_KEY_REPLACEMENTS: Final = {".": "_", "-": "_"}

# Key path delimiter
KEY_DELIMITER: Final = "."

# Supported file extensions per format
YAML_EXTENSIONS: Final = (".yaml", ".yml")
JSON_EXTENSIONS: Final = (".json",)
TOML_EXTENSIONS: Final = (".toml",)
