# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Reader for aconfig ``parsed_flags`` protobuf files."""

import logging
from functools import lru_cache
from pathlib import Path

from google.protobuf import descriptor_pb2, descriptor_pool, message_factory, text_format
from google.protobuf.message import DecodeError, Message

from flaggedapis.flag import Flag
from flaggedapis.reader import ReaderError

logger = logging.getLogger(__name__)

PROTO_PACKAGE = "android.aconfig"
FLAG_STATE_ENABLED = 1
FLAG_STATE_DISABLED = 2
FLAG_PERMISSION_READ_ONLY = 1
FLAG_PERMISSION_READ_WRITE = 2
TEXT_FORMAT_SUFFIXES = frozenset({".textproto", ".pbtxt"})

_Field = descriptor_pb2.FieldDescriptorProto

# (name, number, type, enum or message type name)
_PARSED_FLAG_FIELDS: tuple[tuple[str, int, int, str | None], ...] = (
    ("package", 1, _Field.TYPE_STRING, None),
    ("name", 2, _Field.TYPE_STRING, None),
    ("namespace", 3, _Field.TYPE_STRING, None),
    ("description", 4, _Field.TYPE_STRING, None),
    ("state", 6, _Field.TYPE_ENUM, "flag_state"),
    ("permission", 7, _Field.TYPE_ENUM, "flag_permission"),
    ("is_fixed_read_only", 9, _Field.TYPE_BOOL, None),
    ("is_exported", 10, _Field.TYPE_BOOL, None),
    ("container", 11, _Field.TYPE_STRING, None),
)


def _build_file_descriptor() -> descriptor_pb2.FileDescriptorProto:
    file_proto = descriptor_pb2.FileDescriptorProto(
        name="flaggedapis/aconfig.proto", package=PROTO_PACKAGE, syntax="proto2"
    )
    state = file_proto.enum_type.add(name="flag_state")
    state.value.add(name="ENABLED", number=FLAG_STATE_ENABLED)
    state.value.add(name="DISABLED", number=FLAG_STATE_DISABLED)
    permission = file_proto.enum_type.add(name="flag_permission")
    permission.value.add(name="READ_ONLY", number=FLAG_PERMISSION_READ_ONLY)
    permission.value.add(name="READ_WRITE", number=FLAG_PERMISSION_READ_WRITE)

    parsed_flag = file_proto.message_type.add(name="parsed_flag")
    for name, number, field_type, type_name in _PARSED_FLAG_FIELDS:
        field = parsed_flag.field.add(
            name=name, number=number, type=field_type, label=_Field.LABEL_OPTIONAL
        )
        if type_name is not None:
            field.type_name = f".{PROTO_PACKAGE}.{type_name}"
    parsed_flag.field.add(
        name="bug", number=5, type=_Field.TYPE_STRING, label=_Field.LABEL_REPEATED
    )

    parsed_flags = file_proto.message_type.add(name="parsed_flags")
    parsed_flags.field.add(
        name="parsed_flag",
        number=1,
        type=_Field.TYPE_MESSAGE,
        type_name=f".{PROTO_PACKAGE}.parsed_flag",
        label=_Field.LABEL_REPEATED,
    )
    return file_proto


@lru_cache(maxsize=1)
def parsed_flags_type() -> type[Message]:
    """Return the message class for ``android.aconfig.parsed_flags``.

    The descriptor is registered in a private pool so that it never clashes
    with a generated ``aconfig_pb2`` module imported elsewhere.
    """
    pool = descriptor_pool.DescriptorPool()
    pool.AddSerializedFile(_build_file_descriptor().SerializeToString())
    descriptor = pool.FindMessageTypeByName(f"{PROTO_PACKAGE}.parsed_flags")
    return message_factory.GetMessageClass(descriptor)


class FlagValuesReader:
    """Read flag states from an aconfig ``parsed_flags`` file."""

    def read(self, path: Path) -> dict[Flag, bool]:
        """Read flag states from a binary or text ``parsed_flags`` file.

        Args:
            path: Path to the protobuf file. ``.textproto`` and ``.pbtxt``
                files are parsed with the protobuf text format.

        Returns:
            Mapping from flag to ``True`` when enabled.

        Raises:
            ReaderError: If the file cannot be read or decoded.
        """
        try:
            data = path.read_bytes()
        except OSError as exc:
            raise ReaderError(f"Unable to read flag values '{path}': {exc}") from exc
        if path.suffix.lower() in TEXT_FORMAT_SUFFIXES:
            flags = self.parse_text(data.decode("utf-8", errors="replace"))
        else:
            flags = self.parse(data)
        enabled_count = sum(1 for enabled in flags.values() if enabled)
        logger.info(
            f"Read flag values (path={path} flags={len(flags)} enabled={enabled_count})"
        )
        return flags

    def parse(self, data: bytes) -> dict[Flag, bool]:
        """Parse flag states from a serialized ``parsed_flags`` message."""
        message = parsed_flags_type()()
        try:
            message.ParseFromString(data)
        except DecodeError as exc:
            raise ReaderError(f"Invalid parsed_flags protobuf: {exc}") from exc
        return self._states(message)

    def parse_text(self, text: str) -> dict[Flag, bool]:
        """Parse flag states from a text-format ``parsed_flags`` message.

        Fields this reader does not declare, such as ``trace`` and
        ``metadata``, are skipped.
        """
        message = parsed_flags_type()()
        try:
            text_format.Parse(text, message, allow_unknown_field=True)
        except text_format.ParseError as exc:
            raise ReaderError(f"Invalid parsed_flags text proto: {exc}") from exc
        return self._states(message)

    def _states(self, message: Message) -> dict[Flag, bool]:
        states: dict[Flag, bool] = {}
        for parsed_flag in message.parsed_flag:  # type: ignore[attr-defined]
            flag = Flag.from_parts(parsed_flag.package, parsed_flag.name)
            if flag in states:
                logger.debug(f"Duplicate flag entry; last one wins (flag={flag})")
            states[flag] = parsed_flag.state == FLAG_STATE_ENABLED
        return states
