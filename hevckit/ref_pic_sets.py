"""Short-term reference picture set parsing for HEVC sequence parameter sets."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from hevckit.bitreader import BitReader


@dataclass
class ShortTermRefPicSet:
    """``st_ref_pic_set()`` syntax structure."""

    inter_ref_pic_set_prediction_flag: int = 0
    delta_idx_minus1: int = 0
    delta_rps_sign: int = 0
    abs_delta_rps_minus1: int = 0

    used_by_curr_pic_flag: list[int] = field(default_factory=list)
    use_delta_flag: list[int] = field(default_factory=list)

    num_negative_pics: int = 0
    num_positive_pics: int = 0

    delta_poc_s0_minus1: list[int] = field(default_factory=list)
    used_by_curr_pic_s0_flag: list[int] = field(default_factory=list)
    delta_poc_s1_minus1: list[int] = field(default_factory=list)
    used_by_curr_pic_s1_flag: list[int] = field(default_factory=list)

    @property
    def num_delta_pocs(self) -> int:
        """Number of delta POCs this set contributes when used as a reference."""
        if self.inter_ref_pic_set_prediction_flag:
            return sum(
                1
                for used, use_delta in zip(self.used_by_curr_pic_flag, self.use_delta_flag)
                if used or use_delta
            )
        return self.num_negative_pics + self.num_positive_pics


def parse_short_term_ref_pic_set(
    reader: BitReader,
    max_dec_pic_buffering_minus1: int,
    index: int,
    num_sets: int,
    ref_pic_sets: Sequence[ShortTermRefPicSet],
) -> ShortTermRefPicSet:
    """Read ``st_ref_pic_set(index)``.

    ``max_dec_pic_buffering_minus1`` is the SPS value for the highest sub-layer;
    ``ref_pic_sets`` holds the sets already parsed, used for inter prediction.
    Raises ``ValueError`` when the set is out of range for the stream.
    """
    rps = ShortTermRefPicSet()

    if index:
        rps.inter_ref_pic_set_prediction_flag = reader.read_bits(1)

    if rps.inter_ref_pic_set_prediction_flag:
        if index == num_sets:
            rps.delta_idx_minus1 = reader.read_ue()

        rps.delta_rps_sign = reader.read_bits(1)
        rps.abs_delta_rps_minus1 = reader.read_ue()

        ref_index = index - (rps.delta_idx_minus1 + 1)
        if not 0 <= ref_index < len(ref_pic_sets):
            raise ValueError(
                f"reference picture set {ref_index} is not available for set {index}"
            )
        num_delta_pocs = ref_pic_sets[ref_index].num_delta_pocs

        for _ in range(num_delta_pocs + 1):
            used = reader.read_bits(1)
            rps.used_by_curr_pic_flag.append(used)
            rps.use_delta_flag.append(1 if used else reader.read_bits(1))
        return rps

    rps.num_negative_pics = reader.read_ue()
    rps.num_positive_pics = reader.read_ue()

    if rps.num_negative_pics > max_dec_pic_buffering_minus1:
        raise ValueError("num_negative_pics > sps_max_dec_pic_buffering_minus1")
    if rps.num_positive_pics > max_dec_pic_buffering_minus1:
        raise ValueError("num_positive_pics > sps_max_dec_pic_buffering_minus1")

    for _ in range(rps.num_negative_pics):
        rps.delta_poc_s0_minus1.append(reader.read_ue())
        rps.used_by_curr_pic_s0_flag.append(reader.read_bits(1))

    for _ in range(rps.num_positive_pics):
        rps.delta_poc_s1_minus1.append(reader.read_ue())
        rps.used_by_curr_pic_s1_flag.append(reader.read_bits(1))

    return rps