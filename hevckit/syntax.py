"""Parsers for HEVC syntax structures shared by parameter sets."""

from __future__ import annotations

from dataclasses import dataclass, field

from hevckit.bitreader import BitReader


@dataclass
class ProfileTierLevel:
    """``profile_tier_level()`` syntax structure."""

    general_profile_space: int = 0
    general_tier_flag: int = 0
    general_profile_idc: int = 0
    general_profile_compatibility_flag: list[int] = field(default_factory=lambda: [0] * 32)
    general_progressive_source_flag: int = 0
    general_interlaced_source_flag: int = 0
    general_non_packed_constraint_flag: int = 0
    general_frame_only_constraint_flag: int = 0
    general_level_idc: int = 0

    sub_layer_profile_present_flag: list[int] = field(default_factory=list)
    sub_layer_level_present_flag: list[int] = field(default_factory=list)
    sub_layer_profile_space: list[int] = field(default_factory=list)
    sub_layer_tier_flag: list[int] = field(default_factory=list)
    sub_layer_profile_idc: list[int] = field(default_factory=list)
    sub_layer_profile_compatibility_flag: list[list[int]] = field(default_factory=list)
    sub_layer_progressive_source_flag: list[int] = field(default_factory=list)
    sub_layer_interlaced_source_flag: list[int] = field(default_factory=list)
    sub_layer_non_packed_constraint_flag: list[int] = field(default_factory=list)
    sub_layer_frame_only_constraint_flag: list[int] = field(default_factory=list)
    sub_layer_level_idc: list[int] = field(default_factory=list)


@dataclass
class SubLayerHRDParameters:
    """``sub_layer_hrd_parameters()`` syntax structure."""

    bit_rate_value_minus1: list[int] = field(default_factory=list)
    cpb_size_value_minus1: list[int] = field(default_factory=list)
    cpb_size_du_value_minus1: list[int] = field(default_factory=list)
    bit_rate_du_value_minus1: list[int] = field(default_factory=list)
    cbr_flag: list[int] = field(default_factory=list)


@dataclass
class HRDParameters:
    """``hrd_parameters()`` syntax structure."""

    nal_hrd_parameters_present_flag: int = 0
    vcl_hrd_parameters_present_flag: int = 0
    sub_pic_hrd_params_present_flag: int = 0
    tick_divisor_minus2: int = 0
    du_cpb_removal_delay_increment_length_minus1: int = 0
    sub_pic_cpb_params_in_pic_timing_sei_flag: int = 0
    dpb_output_delay_du_length_minus1: int = 0
    bit_rate_scale: int = 0
    cpb_size_scale: int = 0
    cpb_size_du_scale: int = 0
    initial_cpb_removal_delay_length_minus1: int = 0
    au_cpb_removal_delay_length_minus1: int = 0
    dpb_output_delay_length_minus1: int = 0

    fixed_pic_rate_general_flag: list[int] = field(default_factory=list)
    fixed_pic_rate_within_cvs_flag: list[int] = field(default_factory=list)
    elemental_duration_in_tc_minus1: list[int] = field(default_factory=list)
    low_delay_hrd_flag: list[int] = field(default_factory=list)
    cpb_cnt_minus1: list[int] = field(default_factory=list)

    nal_sub_layer_hrd_parameters: list[SubLayerHRDParameters] = field(default_factory=list)
    vcl_sub_layer_hrd_parameters: list[SubLayerHRDParameters] = field(default_factory=list)


@dataclass
class VUIParameters:
    """``vui_parameters()`` syntax structure."""

    aspect_ratio_info_present_flag: int = 0
    aspect_ratio_idc: int = 0
    sar_width: int = 0
    sar_height: int = 0
    overscan_info_present_flag: int = 0
    overscan_appropriate_flag: int = 0
    video_signal_type_present_flag: int = 0
    video_format: int = 0
    video_full_range_flag: int = 0
    colour_description_present_flag: int = 0
    colour_primaries: int = 0
    transfer_characteristics: int = 0
    matrix_coeffs: int = 0
    chroma_loc_info_present_flag: int = 0
    chroma_sample_loc_type_top_field: int = 0
    chroma_sample_loc_type_bottom_field: int = 0
    neutral_chroma_indication_flag: int = 0
    field_seq_flag: int = 0
    frame_field_info_present_flag: int = 0
    default_display_window_flag: int = 0
    def_disp_win_left_offset: int = 0
    def_disp_win_right_offset: int = 0
    def_disp_win_top_offset: int = 0
    def_disp_win_bottom_offset: int = 0
    vui_timing_info_present_flag: int = 0
    vui_num_units_in_tick: int = 0
    vui_time_scale: int = 0
    vui_poc_proportional_to_timing_flag: int = 0
    vui_num_ticks_poc_diff_one_minus1: int = 0
    vui_hrd_parameters_present_flag: int = 0
    hrd_parameters: HRDParameters = field(default_factory=HRDParameters)
    bitstream_restriction_flag: int = 0
    tiles_fixed_structure_flag: int = 0
    motion_vectors_over_pic_boundaries_flag: int = 0
    restricted_ref_pic_lists_flag: int = 0
    min_spatial_segmentation_idc: int = 0
    max_bytes_per_pic_denom: int = 0
    max_bits_per_min_cu_denom: int = 0
    log2_max_mv_length_horizontal: int = 0
    log2_max_mv_length_vertical: int = 0


@dataclass
class ScalingListData:
    """``scaling_list_data()`` syntax structure, indexed by sizeId then matrixId."""

    scaling_list_pred_mode_flag: list[list[int]] = field(default_factory=list)
    scaling_list_pred_matrix_id_delta: list[list[int]] = field(default_factory=list)
    scaling_list_dc_coef_minus8: list[list[int]] = field(default_factory=list)
    scaling_list_delta_coef: list[list[list[int]]] = field(default_factory=list)


def parse_profile_tier_level(reader: BitReader, max_sub_layers_minus1: int) -> ProfileTierLevel:
    """Read ``profile_tier_level(1, max_sub_layers_minus1)``."""
    ptl = ProfileTierLevel()
    ptl.general_profile_space = reader.read_bits(2)
    ptl.general_tier_flag = reader.read_bits(1)
    ptl.general_profile_idc = reader.read_bits(5)
    ptl.general_profile_compatibility_flag = [reader.read_bits(1) for _ in range(32)]
    ptl.general_progressive_source_flag = reader.read_bits(1)
    ptl.general_interlaced_source_flag = reader.read_bits(1)
    ptl.general_non_packed_constraint_flag = reader.read_bits(1)
    ptl.general_frame_only_constraint_flag = reader.read_bits(1)
    reader.skip_bits(44)
    ptl.general_level_idc = reader.read_bits(8)

    for _ in range(max_sub_layers_minus1):
        ptl.sub_layer_profile_present_flag.append(reader.read_bits(1))
        ptl.sub_layer_level_present_flag.append(reader.read_bits(1))

    if max_sub_layers_minus1 > 0:
        for _ in range(max_sub_layers_minus1, 8):
            reader.skip_bits(2)

    for profile_present, level_present in zip(
        ptl.sub_layer_profile_present_flag, ptl.sub_layer_level_present_flag
    ):
        if profile_present:
            ptl.sub_layer_profile_space.append(reader.read_bits(2))
            ptl.sub_layer_tier_flag.append(reader.read_bits(1))
            ptl.sub_layer_profile_idc.append(reader.read_bits(5))
            ptl.sub_layer_profile_compatibility_flag.append([reader.read_bits(1) for _ in range(32)])
            ptl.sub_layer_progressive_source_flag.append(reader.read_bits(1))
            ptl.sub_layer_interlaced_source_flag.append(reader.read_bits(1))
            ptl.sub_layer_non_packed_constraint_flag.append(reader.read_bits(1))
            ptl.sub_layer_frame_only_constraint_flag.append(reader.read_bits(1))
            reader.skip_bits(44)
        else:
            ptl.sub_layer_profile_space.append(0)
            ptl.sub_layer_tier_flag.append(0)
            ptl.sub_layer_profile_idc.append(0)
            ptl.sub_layer_profile_compatibility_flag.append([])
            ptl.sub_layer_progressive_source_flag.append(0)
            ptl.sub_layer_interlaced_source_flag.append(0)
            ptl.sub_layer_non_packed_constraint_flag.append(0)
            ptl.sub_layer_frame_only_constraint_flag.append(0)

        ptl.sub_layer_level_idc.append(reader.read_bits(8) if level_present else 1)

    return ptl


def parse_sub_layer_hrd_parameters(
    reader: BitReader, sub_pic_hrd_params_present: int, cpb_cnt: int
) -> SubLayerHRDParameters:
    """Read ``sub_layer_hrd_parameters()`` for ``cpb_cnt + 1`` CPB specifications."""
    params = SubLayerHRDParameters()
    for _ in range(cpb_cnt + 1):
        params.bit_rate_value_minus1.append(reader.read_ue())
        params.cpb_size_value_minus1.append(reader.read_ue())
        if sub_pic_hrd_params_present:
            params.cpb_size_du_value_minus1.append(reader.read_ue())
            params.bit_rate_du_value_minus1.append(reader.read_ue())
        else:
            params.cpb_size_du_value_minus1.append(0)
            params.bit_rate_du_value_minus1.append(0)
        params.cbr_flag.append(reader.read_bits(1))
    return params


def parse_hrd_parameters(
    reader: BitReader, common_inf_present: int, max_sub_layers_minus1: int
) -> HRDParameters:
    """Read ``hrd_parameters(common_inf_present, max_sub_layers_minus1)``."""
    hrd = HRDParameters()

    if common_inf_present:
        hrd.nal_hrd_parameters_present_flag = reader.read_bits(1)
        hrd.vcl_hrd_parameters_present_flag = reader.read_bits(1)

        if hrd.nal_hrd_parameters_present_flag or hrd.vcl_hrd_parameters_present_flag:
            hrd.sub_pic_hrd_params_present_flag = reader.read_bits(1)

            if hrd.sub_pic_hrd_params_present_flag:
                hrd.tick_divisor_minus2 = reader.read_bits(8)
                hrd.du_cpb_removal_delay_increment_length_minus1 = reader.read_bits(5)
                hrd.sub_pic_cpb_params_in_pic_timing_sei_flag = reader.read_bits(1)
                hrd.dpb_output_delay_du_length_minus1 = reader.read_bits(5)

            hrd.bit_rate_scale = reader.read_bits(4)
            hrd.cpb_size_scale = reader.read_bits(4)

            if hrd.sub_pic_hrd_params_present_flag:
                hrd.cpb_size_du_scale = reader.read_bits(4)

            hrd.initial_cpb_removal_delay_length_minus1 = reader.read_bits(5)
            hrd.au_cpb_removal_delay_length_minus1 = reader.read_bits(5)
            hrd.dpb_output_delay_length_minus1 = reader.read_bits(5)

    for _ in range(max_sub_layers_minus1 + 1):
        general = reader.read_bits(1)
        within_cvs = 1 if general else reader.read_bits(1)

        elemental = 0
        low_delay = 0
        if within_cvs:
            elemental = reader.read_ue()
        else:
            low_delay = reader.read_bits(1)

        cpb_cnt = 0 if low_delay else reader.read_ue()

        hrd.fixed_pic_rate_general_flag.append(general)
        hrd.fixed_pic_rate_within_cvs_flag.append(within_cvs)
        hrd.elemental_duration_in_tc_minus1.append(elemental)
        hrd.low_delay_hrd_flag.append(low_delay)
        hrd.cpb_cnt_minus1.append(cpb_cnt)

        if hrd.nal_hrd_parameters_present_flag:
            hrd.nal_sub_layer_hrd_parameters.append(
                parse_sub_layer_hrd_parameters(reader, hrd.sub_pic_hrd_params_present_flag, cpb_cnt)
            )
        if hrd.vcl_hrd_parameters_present_flag:
            hrd.vcl_sub_layer_hrd_parameters.append(
                parse_sub_layer_hrd_parameters(reader, hrd.sub_pic_hrd_params_present_flag, cpb_cnt)
            )

    return hrd


def parse_vui_parameters(reader: BitReader, max_sub_layers_minus1: int) -> VUIParameters:
    """Read ``vui_parameters()``; unsignalled colour fields get their inferred values."""
    vui = VUIParameters()

    vui.aspect_ratio_info_present_flag = reader.read_bits(1)
    if vui.aspect_ratio_info_present_flag:
        vui.aspect_ratio_idc = reader.read_bits(8)
        if vui.aspect_ratio_idc == 255:  # extended SAR
            vui.sar_width = reader.read_bits(16)
            vui.sar_height = reader.read_bits(16)

    vui.overscan_info_present_flag = reader.read_bits(1)
    if vui.overscan_info_present_flag:
        vui.overscan_appropriate_flag = reader.read_bits(1)

    vui.video_format = 5
    vui.video_full_range_flag = 0
    vui.colour_primaries = 2
    vui.transfer_characteristics = 2
    vui.matrix_coeffs = 2

    vui.video_signal_type_present_flag = reader.read_bits(1)
    if vui.video_signal_type_present_flag:
        vui.video_format = reader.read_bits(3)
        vui.video_full_range_flag = reader.read_bits(1)
        vui.colour_description_present_flag = reader.read_bits(1)
        if vui.colour_description_present_flag:
            vui.colour_primaries = reader.read_bits(8)
            vui.transfer_characteristics = reader.read_bits(8)
            vui.matrix_coeffs = reader.read_bits(8)

    vui.chroma_loc_info_present_flag = reader.read_bits(1)
    if vui.chroma_loc_info_present_flag:
        vui.chroma_sample_loc_type_top_field = reader.read_ue()
        vui.chroma_sample_loc_type_bottom_field = reader.read_ue()

    vui.neutral_chroma_indication_flag = reader.read_bits(1)
    vui.field_seq_flag = reader.read_bits(1)
    vui.frame_field_info_present_flag = reader.read_bits(1)
    vui.default_display_window_flag = reader.read_bits(1)
    if vui.default_display_window_flag:
        vui.def_disp_win_left_offset = reader.read_ue()
        vui.def_disp_win_right_offset = reader.read_ue()
        vui.def_disp_win_top_offset = reader.read_ue()
        vui.def_disp_win_bottom_offset = reader.read_ue()

    vui.vui_timing_info_present_flag = reader.read_bits(1)
    if vui.vui_timing_info_present_flag:
        vui.vui_num_units_in_tick = reader.read_bits(32)
        vui.vui_time_scale = reader.read_bits(32)
        vui.vui_poc_proportional_to_timing_flag = reader.read_bits(1)
        if vui.vui_poc_proportional_to_timing_flag:
            vui.vui_num_ticks_poc_diff_one_minus1 = reader.read_ue()
        vui.vui_hrd_parameters_present_flag = reader.read_bits(1)
        if vui.vui_hrd_parameters_present_flag:
            vui.hrd_parameters = parse_hrd_parameters(reader, 1, max_sub_layers_minus1)

    vui.bitstream_restriction_flag = reader.read_bits(1)
    if vui.bitstream_restriction_flag:
        vui.tiles_fixed_structure_flag = reader.read_bits(1)
        vui.motion_vectors_over_pic_boundaries_flag = reader.read_bits(1)
        vui.restricted_ref_pic_lists_flag = reader.read_bits(1)
        vui.min_spatial_segmentation_idc = reader.read_ue()
        vui.max_bytes_per_pic_denom = reader.read_ue()
        vui.max_bits_per_min_cu_denom = reader.read_ue()
        vui.log2_max_mv_length_horizontal = reader.read_ue()
        vui.log2_max_mv_length_vertical = reader.read_ue()

    return vui


def parse_scaling_list_data(reader: BitReader) -> ScalingListData:
    """Read ``scaling_list_data()`` for the four block sizes."""
    sld = ScalingListData(scaling_list_dc_coef_minus8=[[0] * 6, [0] * 2])

    for size_id in range(4):
        matrix_count = 2 if size_id == 3 else 6
        pred_mode = [0] * matrix_count
        matrix_delta = [0] * matrix_count
        delta_coef: list[list[int]] = [[] for _ in range(matrix_count)]

        for matrix_id in range(matrix_count):
            pred_mode[matrix_id] = reader.read_bits(1)
            if not pred_mode[matrix_id]:
                matrix_delta[matrix_id] = reader.read_ue()
                continue

            coef_num = min(64, 1 << (4 + (size_id << 1)))
            if size_id > 1:
                sld.scaling_list_dc_coef_minus8[size_id - 2][matrix_id] = reader.read_se()
            delta_coef[matrix_id] = [reader.read_se() for _ in range(coef_num)]

        sld.scaling_list_pred_mode_flag.append(pred_mode)
        sld.scaling_list_pred_matrix_id_delta.append(matrix_delta)
        sld.scaling_list_delta_coef.append(delta_coef)

    return sld