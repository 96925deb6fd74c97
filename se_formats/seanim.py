"""
SEAnim reader/writer.

Layout (little-endian):

    char[6]  magic "SEAnim"
    int16    version (1)
    int16    header size (0x1C)
    uint8    animation type
    uint8    flags (bit 0: looping)
    uint8    presence flags (AnimPresence)
    uint8    data flags (bit 0: 64-bit floats)
    uint8[2] reserved
    float    frame rate
    int32    frame count
    int32    bone count
    uint8    modifier count
    uint8[3] reserved
    int32    notification count
    --- bone tags, modifiers, per-bone key blocks, notifications

Frame indices and per-bone key counts are stored at width_for(frame count - 1).
"""

import logging
from typing import Dict, List, Optional

from .anim.anim import Anim
from .anim.track import AnimationType, Keyframe
from .binary.stream import (
    BinaryReader,
    BinaryWriter,
    IntWidth,
    PathOrStream,
    open_stream,
    width_for,
)
from .binary.flags import AnimPresence, anim_presence
from .errors import FormatError

logger = logging.getLogger(__name__)

MAGIC = b"SEAnim"
VERSION = 1
HEADER_SIZE = 0x1C

FLAG_LOOPING = 1 << 0
DATA_HIGH_PRECISION = 1 << 0


def _modifier_width(bone_count: int) -> IntWidth:
    return IntWidth.U8 if bone_count <= 0xFF else IntWidth.U16


# Key kinds in on-disk order: (presence flag, attribute, component count)
_KEY_BLOCKS = (
    (AnimPresence.BONE_LOC, "position_keys", 3),
    (AnimPresence.BONE_ROT, "rotation_keys", 4),
    (AnimPresence.BONE_SCALE, "scale_keys", 3),
)


def write_seanim(anim: Anim, target: PathOrStream, high_precision: Optional[bool] = None) -> None:
    """
    Write an animation in SEAnim format

    Args:
        anim: Animation to write
        target: File path (created/overwritten) or writable binary stream
        high_precision: Store vectors and quaternions as 64-bit floats.
            None uses anim.high_precision

    A modifier on a bone without keys gets the index -1, stored as 0xFF
    (or 0xFFFF when bone indices are two bytes wide).
    """
    if high_precision is None:
        high_precision = anim.high_precision
    presence = anim_presence(anim)
    frame_count = anim.frame_count
    bone_count = anim.bone_count
    tags = anim.build_bone_tags()
    frame_width = width_for(frame_count - 1)

    index_width = _modifier_width(bone_count)
    index_mask = (1 << (8 * index_width)) - 1
    modifiers = [
        ((tags.index(bone) if bone in tags else -1) & index_mask, modifier)
        for bone, modifier in anim.bone_modifiers.items()
    ]

    logger.debug(
        "Writing SEAnim: %d frames, %d bones, %d notetracks, frame width %d",
        frame_count, bone_count, anim.notification_count, frame_width,
    )

    with open_stream(target, "wb") as f:
        w = BinaryWriter(f)

        w.write(MAGIC)
        w.write_i16(VERSION)
        w.write_i16(HEADER_SIZE)
        w.write_u8(int(anim.anim_type))
        w.write_u8(FLAG_LOOPING if anim.looping else 0)
        w.write_u8(int(presence))
        w.write_u8(DATA_HIGH_PRECISION if high_precision else 0)
        w.write_padding(2)
        w.write_f32(anim.frame_rate)

        w.write_i32(frame_count)
        w.write_i32(bone_count)
        w.write_u8(len(anim.bone_modifiers))
        w.write_padding(3)
        w.write_i32(anim.notification_count)

        for tag in tags:
            w.write_string(tag)

        for index, modifier in modifiers:
            w.write_uint(index, index_width)
            w.write_u8(int(modifier))

        for bone in tags:
            w.write_u8(0)  # Bone flags
            for flag, attr, _ in _KEY_BLOCKS:
                if not presence & flag:
                    continue
                keys: List[Keyframe] = getattr(anim, attr).get(bone, [])
                w.write_uint(len(keys), frame_width)
                for key in keys:
                    w.write_uint(key.frame, frame_width)
                    w.write_floats(key.value, double=high_precision)

        if presence & AnimPresence.NOTE:
            for name, keys in anim.notetracks.items():
                for key in keys:
                    w.write_uint(key.frame, frame_width)
                    w.write_string(name)


def read_seanim(source: PathOrStream) -> Anim:
    """
    Read an SEAnim file

    Args:
        source: File path or readable binary stream

    Returns:
        Anim instance

    Raises:
        FormatError: If the magic does not match
        EOFError: If the stream is truncated
    """
    with open_stream(source, "rb") as f:
        r = BinaryReader(f)

        magic = r.read(len(MAGIC))
        if magic != MAGIC:
            raise FormatError(MAGIC, magic)

        version = r.read_i16()
        header_size = r.read_i16()
        anim_type = AnimationType(r.read_u8())
        flags = r.read_u8()
        presence = AnimPresence(r.read_u8())
        high_precision = bool(r.read_u8() & DATA_HIGH_PRECISION)
        r.skip(2)
        frame_rate = r.read_f32()

        frame_count = r.read_i32()
        bone_count = r.read_i32()
        modifier_count = r.read_u8()
        r.skip(3)
        notification_count = r.read_i32()

        logger.debug(
            "Reading SEAnim v%d (header size 0x%X): %d frames, %d bones, %d notetracks",
            version, header_size, frame_count, bone_count, notification_count,
        )

        anim = Anim(anim_type=anim_type, looping=bool(flags & FLAG_LOOPING), frame_rate=frame_rate)
        anim.high_precision = high_precision
        frame_width = width_for(frame_count - 1)

        tags = [r.read_string() for _ in range(bone_count)]
        if anim_type == AnimationType.DELTA and tags:
            anim.delta_tag_name = tags[0]

        index_width = _modifier_width(bone_count)
        for _ in range(modifier_count):
            index = r.read_uint(index_width)
            modifier = AnimationType(r.read_u8())
            if index >= len(tags):
                logger.warning("Skipping modifier for unknown bone index %d", index)
                continue
            anim.add_bone_modifier(tags[index], modifier)

        for bone in tags:
            r.read_u8()  # Bone flags
            for flag, attr, components in _KEY_BLOCKS:
                if not presence & flag:
                    continue
                count = r.read_uint(frame_width)
                if count == 0:
                    continue
                keys: Dict[str, List[Keyframe]] = getattr(anim, attr)
                keys[bone] = [
                    Keyframe(r.read_uint(frame_width), r.read_floats(components, double=high_precision))
                    for _ in range(count)
                ]

        if presence & AnimPresence.NOTE:
            for _ in range(notification_count):
                frame = r.read_uint(frame_width)
                anim.add_notetrack(r.read_string(), frame)

    return anim
