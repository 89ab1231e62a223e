import pytest

from hevckit.bitreader import BitReader
from hevckit.nal import profile_name
from hevckit.syntax import (
    HRDParameters,
    parse_hrd_parameters,
    parse_profile_tier_level,
    parse_scaling_list_data,
    parse_sub_layer_hrd_parameters,
    parse_vui_parameters,
)


def _with_epb(raw):
    out = bytearray()
    zeros = 0
    for byte in raw:
        if zeros >= 2 and byte <= 3:
            out.append(3)
            zeros = 0
        out.append(byte)
        zeros = zeros + 1 if byte == 0 else 0
    return bytes(out)


class _Bits:
    def __init__(self):
        self.bits = []

    def put(self, value, count):
        self.bits.extend((value >> (count - 1 - i)) & 1 for i in range(count))
        return self

    def ue(self, value):
        code = value + 1
        n = code.bit_length()
        self.put(0, n - 1)
        self.put(code, n)
        return self

    def se(self, value):
        return self.ue(2 * value - 1 if value > 0 else -2 * value)

    def reader(self):
        bits = self.bits + [1]
        bits += [0] * (-len(bits) % 8)
        raw = bytes(
            int("".join(map(str, bits[i:i + 8])), 2) for i in range(0, len(bits), 8)
        )
        return BitReader(_with_epb(raw) + b"\xff\xff")


def _write_general_ptl(w, profile_idc, compat, level):
    w.put(0, 2).put(1, 1).put(profile_idc, 5)
    for flag in compat:
        w.put(flag, 1)
    w.put(1, 1).put(0, 1).put(0, 1).put(1, 1)
    w.put(0, 44)
    w.put(level, 8)


def test_profile_tier_level_without_sub_layers():
    compat = [1 if i in (1, 2) else 0 for i in range(32)]
    w = _Bits()
    _write_general_ptl(w, 1, compat, 93)
    w.ue(5)
    reader = w.reader()

    ptl = parse_profile_tier_level(reader, 0)

    assert ptl.general_profile_space == 0
    assert ptl.general_tier_flag == 1
    assert ptl.general_profile_idc == 1
    assert profile_name(ptl.general_profile_idc) == "Main"
    assert ptl.general_profile_compatibility_flag == compat
    assert ptl.general_progressive_source_flag == 1
    assert ptl.general_frame_only_constraint_flag == 1
    assert ptl.general_level_idc == 93
    assert ptl.sub_layer_level_idc == []
    assert reader.read_ue() == 5


def test_profile_tier_level_with_sub_layers():
    compat = [0] * 32
    w = _Bits()
    _write_general_ptl(w, 2, compat, 120)
    w.put(1, 1).put(0, 1)  # layer 0: profile present, level absent
    w.put(0, 1).put(1, 1)  # layer 1: profile absent, level present
    w.put(0, 12)  # alignment pairs for layers 2..7
    sub_compat = [1 if i == 2 else 0 for i in range(32)]
    w.put(0, 2).put(0, 1).put(2, 5)
    for flag in sub_compat:
        w.put(flag, 1)
    w.put(1, 1).put(0, 1).put(0, 1).put(0, 1)
    w.put(0, 44)
    w.put(90, 8)
    w.ue(3)
    reader = w.reader()

    ptl = parse_profile_tier_level(reader, 2)

    assert ptl.general_profile_idc == 2
    assert ptl.sub_layer_profile_present_flag == [1, 0]
    assert ptl.sub_layer_level_present_flag == [0, 1]
    assert ptl.sub_layer_profile_idc == [2, 0]
    assert ptl.sub_layer_profile_compatibility_flag == [sub_compat, []]
    assert ptl.sub_layer_progressive_source_flag == [1, 0]
    assert ptl.sub_layer_level_idc == [1, 90]
    assert reader.read_ue() == 3


def test_profile_tier_level_truncated_raises():
    with pytest.raises(EOFError):
        parse_profile_tier_level(BitReader(b"\x01\x60"), 0)


def test_sub_layer_hrd_parameters_with_sub_pic():
    w = _Bits()
    for values in ((10, 30, 1, 3, 1), (20, 40, 2, 4, 0)):
        w.ue(values[0]).ue(values[1]).ue(values[2]).ue(values[3]).put(values[4], 1)
    w.ue(7)
    reader = w.reader()

    params = parse_sub_layer_hrd_parameters(reader, 1, 1)

    assert params.bit_rate_value_minus1 == [10, 20]
    assert params.cpb_size_value_minus1 == [30, 40]
    assert params.cpb_size_du_value_minus1 == [1, 2]
    assert params.bit_rate_du_value_minus1 == [3, 4]
    assert params.cbr_flag == [1, 0]
    assert reader.read_ue() == 7


def test_sub_layer_hrd_parameters_without_sub_pic():
    w = _Bits().ue(6).ue(9).put(1, 1).ue(2)
    reader = w.reader()

    params = parse_sub_layer_hrd_parameters(reader, 0, 0)

    assert params.bit_rate_value_minus1 == [6]
    assert params.cpb_size_value_minus1 == [9]
    assert params.cpb_size_du_value_minus1 == [0]
    assert params.cbr_flag == [1]
    assert reader.read_ue() == 2


def test_hrd_parameters_with_nal_sub_layers():
    w = _Bits()
    w.put(1, 1).put(0, 1)  # nal present, vcl absent
    w.put(0, 1)  # sub_pic_hrd_params_present_flag
    w.put(4, 4).put(6, 4)
    w.put(23, 5).put(22, 5).put(21, 5)
    w.put(1, 1)  # fixed_pic_rate_general_flag
    w.ue(0)  # elemental_duration_in_tc_minus1
    w.ue(1)  # cpb_cnt_minus1
    w.ue(100).ue(200).put(0, 1)
    w.ue(300).ue(400).put(1, 1)
    w.ue(4)
    reader = w.reader()

    hrd = parse_hrd_parameters(reader, 1, 0)

    assert hrd.nal_hrd_parameters_present_flag == 1
    assert hrd.vcl_hrd_parameters_present_flag == 0
    assert hrd.bit_rate_scale == 4
    assert hrd.cpb_size_scale == 6
    assert hrd.initial_cpb_removal_delay_length_minus1 == 23
    assert hrd.au_cpb_removal_delay_length_minus1 == 22
    assert hrd.dpb_output_delay_length_minus1 == 21
    assert hrd.fixed_pic_rate_general_flag == [1]
    assert hrd.fixed_pic_rate_within_cvs_flag == [1]
    assert hrd.low_delay_hrd_flag == [0]
    assert hrd.cpb_cnt_minus1 == [1]
    assert len(hrd.nal_sub_layer_hrd_parameters) == 1
    assert hrd.vcl_sub_layer_hrd_parameters == []
    assert hrd.nal_sub_layer_hrd_parameters[0].bit_rate_value_minus1 == [100, 300]
    assert hrd.nal_sub_layer_hrd_parameters[0].cbr_flag == [0, 1]
    assert reader.read_ue() == 4


def test_hrd_parameters_without_common_info():
    w = _Bits()
    for _ in range(2):
        w.put(0, 1).put(0, 1).put(1, 1)  # not fixed rate, low delay
    w.ue(8)
    reader = w.reader()

    hrd = parse_hrd_parameters(reader, 0, 1)

    assert hrd.fixed_pic_rate_general_flag == [0, 0]
    assert hrd.fixed_pic_rate_within_cvs_flag == [0, 0]
    assert hrd.low_delay_hrd_flag == [1, 1]
    assert hrd.cpb_cnt_minus1 == [0, 0]
    assert hrd.nal_sub_layer_hrd_parameters == []
    assert reader.read_ue() == 8


def test_vui_minimal_uses_inferred_colour_values():
    w = _Bits().put(0, 10).ue(6)
    reader = w.reader()

    vui = parse_vui_parameters(reader, 0)

    assert vui.video_format == 5
    assert vui.video_full_range_flag == 0
    assert vui.colour_primaries == 2
    assert vui.transfer_characteristics == 2
    assert vui.matrix_coeffs == 2
    assert vui.hrd_parameters == HRDParameters()
    assert reader.read_ue() == 6


def test_vui_full():
    w = _Bits()
    w.put(1, 1).put(255, 8).put(4, 16).put(3, 16)
    w.put(1, 1).put(1, 1)
    w.put(1, 1).put(1, 3).put(1, 1).put(1, 1).put(9, 8).put(16, 8).put(9, 8)
    w.put(1, 1).ue(1).ue(2)
    w.put(0, 1).put(0, 1).put(0, 1)
    w.put(1, 1).ue(1).ue(2).ue(3).ue(4)
    w.put(1, 1).put(1001, 32).put(60000, 32).put(1, 1).ue(0)
    w.put(1, 1)  # hrd present
    w.put(0, 1).put(0, 1)  # no nal/vcl hrd
    w.put(1, 1).ue(0).ue(0)  # one sub-layer
    w.put(1, 1).put(1, 1).put(0, 1).put(1, 1)
    w.ue(0).ue(2).ue(1).ue(15).ue(15)
    w.ue(9)
    reader = w.reader()

    vui = parse_vui_parameters(reader, 0)

    assert vui.aspect_ratio_idc == 255
    assert (vui.sar_width, vui.sar_height) == (4, 3)
    assert vui.overscan_appropriate_flag == 1
    assert vui.video_format == 1
    assert vui.video_full_range_flag == 1
    assert (vui.colour_primaries, vui.transfer_characteristics, vui.matrix_coeffs) == (9, 16, 9)
    assert (vui.chroma_sample_loc_type_top_field, vui.chroma_sample_loc_type_bottom_field) == (1, 2)
    assert (
        vui.def_disp_win_left_offset,
        vui.def_disp_win_right_offset,
        vui.def_disp_win_top_offset,
        vui.def_disp_win_bottom_offset,
    ) == (1, 2, 3, 4)
    assert vui.vui_num_units_in_tick == 1001
    assert vui.vui_time_scale == 60000
    assert vui.vui_hrd_parameters_present_flag == 1
    assert vui.hrd_parameters.fixed_pic_rate_within_cvs_flag == [1]
    assert vui.tiles_fixed_structure_flag == 1
    assert vui.restricted_ref_pic_lists_flag == 1
    assert vui.max_bytes_per_pic_denom == 2
    assert (vui.log2_max_mv_length_horizontal, vui.log2_max_mv_length_vertical) == (15, 15)
    assert reader.read_ue() == 9


def test_scaling_list_predicted_matrices():
    w = _Bits()
    counts = (6, 6, 6, 2)
    for size_id, count in enumerate(counts):
        for matrix_id in range(count):
            w.put(0, 1).ue(matrix_id % 2)
    w.ue(5)
    reader = w.reader()

    sld = parse_scaling_list_data(reader)

    assert [len(row) for row in sld.scaling_list_pred_mode_flag] == list(counts)
    assert all(flag == 0 for row in sld.scaling_list_pred_mode_flag for flag in row)
    assert sld.scaling_list_pred_matrix_id_delta[0] == [0, 1, 0, 1, 0, 1]
    assert sld.scaling_list_pred_matrix_id_delta[3] == [0, 1]
    assert all(coefs == [] for row in sld.scaling_list_delta_coef for coefs in row)
    assert [len(row) for row in sld.scaling_list_dc_coef_minus8] == [6, 2]
    assert reader.read_ue() == 5


def test_scaling_list_explicit_coefficients():
    pattern = [-2, -1, 0, 1, 2]
    w = _Bits()
    counts = (6, 6, 6, 2)
    coef_nums = (16, 64, 64, 64)
    for size_id, count in enumerate(counts):
        for matrix_id in range(count):
            w.put(1, 1)
            if size_id > 1:
                w.se(-3)
            for i in range(coef_nums[size_id]):
                w.se(pattern[i % 5])
    w.ue(4)
    reader = w.reader()

    sld = parse_scaling_list_data(reader)

    for size_id, count in enumerate(counts):
        assert [len(c) for c in sld.scaling_list_delta_coef[size_id]] == [coef_nums[size_id]] * count
    assert sld.scaling_list_delta_coef[0][0] == [pattern[i % 5] for i in range(16)]
    assert sld.scaling_list_delta_coef[3][1] == [pattern[i % 5] for i in range(64)]
    assert sld.scaling_list_dc_coef_minus8 == [[-3] * 6, [-3] * 2]
    assert all(flag == 1 for row in sld.scaling_list_pred_mode_flag for flag in row)
    assert reader.read_ue() == 4