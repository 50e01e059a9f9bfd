"""Constantes e valores padrão do object cache."""

# Nomes reservados dos acessores dinâmicos (leitura, escrita, existência, remoção)
READ_ACCESSOR = "__getattr__"
WRITE_ACCESSOR = "__setattr__"
EXISTS_ACCESSOR = "__hasattr__"
DELETE_ACCESSOR = "__delattr__"

RESERVED_ACCESSORS = frozenset({READ_ACCESSOR, WRITE_ACCESSOR, EXISTS_ACCESSOR, DELETE_ACCESSOR})

# Conversão para string nunca é cacheada por padrão
DEFAULT_NON_CACHE_METHODS = frozenset({"__str__"})

DEFAULT_TTL_SECONDS = 3600
MIN_TTL_SECONDS = 1
DEFAULT_KEY_NAMESPACE = "objcache"

# Separador entre entity key e nome da operação
ENTITY_KEY_SEPARATOR = "::"

# Mensagens de erro
ERROR_MISSING_ENTITY = "Missing option 'entity'"
ERROR_MISSING_STORAGE = "Missing option 'storage'"
ERROR_INVALID_ENTITY = "Invalid entity, must be an object"
ERROR_INVALID_STORAGE = (
    "storage must implement StorageAdapter (get/set/remove_many), "
    "be a dict of DaprStateBackend options or the name of a Dapr state store"
)
ERROR_RESERVED_ACCESSOR = "Dynamic attributes are handled by option 'cache_dynamic_properties', got {name!r}"
ERROR_TTL_INVALID = "ttl_seconds must be >= 1, got {value}"
ERROR_TTL_TYPE_INVALID = "ttl_seconds must be int, got {type_name}"
ERROR_MISSING_ENTITY_TOKEN = "Identity-derived keys need an entity token (or configure 'entity_key')"
