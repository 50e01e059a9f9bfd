"""Serialização de valores cacheados usando MsgPack."""

from typing import Any

import msgpack

from .exceptions import CacheSerializationError


class MsgPackSerializer:
    """Serializer padrão do object cache.

    Os valores retornados pela entidade são gravados no storage como
    bytes MsgPack. Um valor ``None`` também é serializado (``b"\\xc0"``),
    de modo que o storage consegue distinguir "resultado None cacheado"
    de "chave ausente".

    Tipos suportados:
    - None, bool, int, float, str, bytes
    - list, tuple (retornado como list), dict
    - set/frozenset (retornados como list)
    """

    def serialize(self, data: Any) -> bytes:
        """Serializa dados Python para bytes MsgPack.

        Raises:
            CacheSerializationError: Se o valor não for serializável
        """
        try:
            result = msgpack.packb(data, use_bin_type=True, default=self._encode_unknown)
        except (TypeError, ValueError, OverflowError) as e:
            raise CacheSerializationError(f"Falha ao serializar valor do tipo {type(data).__name__}: {e}") from e
        if result is None:
            raise CacheSerializationError("msgpack.packb retornou None")
        return result

    def deserialize(self, data: bytes) -> Any:
        """Deserializa bytes MsgPack para dados Python.

        Raises:
            CacheSerializationError: Se os bytes não forem MsgPack válido
        """
        try:
            return msgpack.unpackb(data, raw=False, strict_map_key=False)
        except (msgpack.UnpackException, ValueError) as e:
            raise CacheSerializationError(f"Falha ao deserializar dados: {e}") from e

    @staticmethod
    def _encode_unknown(obj: Any) -> Any:
        if isinstance(obj, (set, frozenset)):
            return list(obj)
        raise TypeError(f"Tipo não suportado: {type(obj).__name__}")
