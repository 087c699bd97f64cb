"""JSON and YAML rendering of the metadata record.

JSON is the single source of truth: the record is encoded once with msgspec,
decoded back into plain containers, and the YAML document is dumped from
those containers. Both renderings therefore carry the same keys in the same
order with the same scalar values. If either step fails nothing is returned.
"""

from __future__ import annotations

import dataclasses as dc
import io
import typing as typ

import msgspec
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError
from ruamel.yaml.representer import RoundTripRepresenter

from ghmeta.errors import SerializationError

if typ.TYPE_CHECKING:
    from ghmeta.metadata.models import MetadataRecord

YAML_WIDTH = 4096
JSON_INDENT = 2

# Plain scalars a YAML 1.1 loader reads as booleans or null.
YAML11_RESERVED_WORDS = frozenset(
    {"y", "n", "yes", "no", "on", "off", "true", "false", "null", "~"}
)


class _MetadataRepresenter(RoundTripRepresenter):
    """Round-trip representer that spells ``None`` as ``null``.

    Strings such as ``yes`` or ``on`` are single-quoted so YAML 1.1 and 1.2
    loaders both read them back as strings.
    """


def _represent_null(
    representer: RoundTripRepresenter,
    data: None,
) -> typ.Any:  # noqa: ANN401
    del data
    return representer.represent_scalar("tag:yaml.org,2002:null", "null")


def _represent_str(
    representer: RoundTripRepresenter,
    data: str,
) -> typ.Any:  # noqa: ANN401
    if data.lower() in YAML11_RESERVED_WORDS:
        return representer.represent_scalar("tag:yaml.org,2002:str", data, style="'")
    return representer.represent_str(data)


_MetadataRepresenter.add_representer(type(None), _represent_null)
_MetadataRepresenter.add_representer(str, _represent_str)


@dc.dataclass(frozen=True, slots=True)
class RenderedMetadata:
    """Every rendering of one record, produced together.

    Attributes
    ----------
    data
        Decoded JSON structure both text renderings were derived from.
    json
        Compact JSON.
    json_pretty
        JSON indented by two spaces.
    yaml
        YAML block document dumped from ``data``.

    """

    data: dict[str, typ.Any]
    json: str
    json_pretty: str
    yaml: str


def _yaml() -> YAML:
    yaml = YAML()
    yaml.Representer = _MetadataRepresenter
    yaml.default_flow_style = False
    yaml.width = YAML_WIDTH
    return yaml


def dump_yaml(data: dict[str, typ.Any]) -> str:
    """Dump plain containers to a YAML block document, keeping key order."""
    stream = io.StringIO()
    _yaml().dump(data, stream)
    return stream.getvalue()


def serialize_record(record: MetadataRecord) -> RenderedMetadata:
    """Render ``record`` as compact JSON, pretty JSON, and YAML.

    Raises
    ------
    SerializationError
        If either the JSON or the YAML rendering fails.

    """
    try:
        encoded = msgspec.json.encode(record)
        data = msgspec.json.decode(encoded)
        pretty = msgspec.json.format(encoded, indent=JSON_INDENT)
    except (msgspec.EncodeError, msgspec.DecodeError, TypeError) as exc:
        raise SerializationError.rendering_failed("json", exc) from exc
    if not isinstance(data, dict):
        raise SerializationError.rendering_failed(
            "json", TypeError("record did not encode to a JSON object")
        )

    try:
        yaml_text = dump_yaml(data)
    except YAMLError as exc:
        raise SerializationError.rendering_failed("yaml", exc) from exc

    return RenderedMetadata(
        data=data,
        json=encoded.decode("utf-8"),
        json_pretty=pretty.decode("utf-8"),
        yaml=yaml_text,
    )
