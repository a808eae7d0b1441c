"""
Virtual Event Power Emission Calculator
Estimates CO2e from virtual/hybrid event streaming across three layers:

    1. devices      - participant screens, cameras, audio
    2. network      - transmission between data centre, ISP and participant
    3. data_centre  - encoding, CDN, cloud infrastructure

Devices and network are priced with the participant-side grid factor, the
data centre layer with the data-centre grid factor.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional, Sequence

from eventcarbon.utils.aggregation import round3, round_count, total
from eventcarbon.utils.errors import RangeError
from eventcarbon.utils.factors import (
    BITRATE_KBPS,
    DATA_CENTRE_KWH_PER_GB,
    DEFAULT_DATA_CENTRE_GRID,
    DEFAULT_PARTICIPANT_GRID,
    DEFAULT_SEGMENT_PROFILE,
    DEVICE_WATTS,
    GRID_FACTORS,
    NETWORK_KWH_PER_GB,
    VIRTUAL_POWER_CITATION,
    VIRTUAL_POWER_FACTOR_YEAR,
    DeviceType,
    NetworkType,
    VideoQuality,
    require_complete,
)
from eventcarbon.utils.insights import generate_virtual_power_insights
from eventcarbon.utils.validation import (
    get_field,
    optional_number,
    parse_enum,
    require_entries,
    require_number,
    require_record,
)

SECONDS_PER_HOUR = Decimal('3600')
BITS_PER_GB = Decimal('8000000')  # 8 bits/byte x 1e6 kB per GB, bitrate in kbps


@dataclass
class ParticipantSegment:
    """Participants sharing the same device and network profile."""

    count: int
    device: DeviceType
    network: NetworkType

    @classmethod
    def from_value(cls, raw: Any, index: int) -> 'ParticipantSegment':
        require_record(raw, index)
        count = require_number(raw, 'count', index)
        if count != count.to_integral_value():
            raise RangeError(f'count must be a whole number, got {count}',
                             index=index, field='count', value=get_field(raw, 'count'))
        return cls(
            count=int(count),
            device=parse_enum(DeviceType, get_field(raw, 'device'), 'device', index),
            network=parse_enum(NetworkType, get_field(raw, 'network'), 'network', index),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {'count': self.count, 'device': self.device.value, 'network': self.network.value}


@dataclass
class VirtualPowerInput:
    participant_count: Decimal
    duration_hours: Decimal
    quality: VideoQuality = VideoQuality.HD
    participant_grid_factor: Optional[Decimal] = None
    data_centre_grid_factor: Optional[Decimal] = None
    participant_segments: Optional[List[ParticipantSegment]] = None
    custom_fixed_network_kwh_per_gb: Optional[Decimal] = None
    custom_datacentre_kwh_per_gb: Optional[Decimal] = None

    @classmethod
    def from_value(cls, raw: Any) -> 'VirtualPowerInput':
        require_record(raw)
        quality = get_field(raw, 'quality')
        segments = get_field(raw, 'participant_segments')
        if segments is not None:
            segments = [
                ParticipantSegment.from_value(seg, i)
                for i, seg in enumerate(require_entries(segments, 'participantSegments'))
            ]
        return cls(
            participant_count=require_number(raw, 'participant_count', allow_zero=False),
            duration_hours=require_number(raw, 'duration_hours', allow_zero=False),
            quality=(
                VideoQuality.HD if quality is None
                else parse_enum(VideoQuality, quality, 'quality', label='video quality')
            ),
            participant_grid_factor=optional_number(raw, 'participant_grid_factor'),
            data_centre_grid_factor=optional_number(raw, 'data_centre_grid_factor'),
            participant_segments=segments,
            custom_fixed_network_kwh_per_gb=optional_number(raw, 'custom_fixed_network_kwh_per_gb'),
            custom_datacentre_kwh_per_gb=optional_number(raw, 'custom_datacentre_kwh_per_gb'),
        )


@dataclass
class LayerBreakdown:
    layer: str
    total_kwh: Decimal
    total_kg_co2e: Decimal
    detail: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            'layer': self.layer,
            'totalKwh': float(self.total_kwh),
            'totalKgCO2e': float(self.total_kg_co2e),
            'detail': self.detail,
        }


@dataclass
class VirtualPowerEmissionResult:
    total_kg_co2e: Decimal
    total_kwh: Decimal
    total_data_gb: Decimal
    by_layer: List[LayerBreakdown]
    segments: List[ParticipantSegment]
    assumptions: Dict[str, Any]
    source: str
    factor_year: int
    notes: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'totalKgCO2e': float(self.total_kg_co2e),
            'totalKwh': float(self.total_kwh),
            'totalDataGb': float(self.total_data_gb),
            'byLayer': [layer.to_dict() for layer in self.by_layer],
            'segments': [seg.to_dict() for seg in self.segments],
            'assumptions': dict(self.assumptions),
            'source': self.source,
            'factorYear': self.factor_year,
            'notes': list(self.notes),
        }


def bitrate_to_gb_per_hour(bitrate_kbps: Decimal) -> Decimal:
    return bitrate_kbps * SECONDS_PER_HOUR / BITS_PER_GB


def rescale_segments(participant_count: Decimal,
                     segments: Sequence[ParticipantSegment]) -> List[ParticipantSegment]:
    """Scale segment counts proportionally so they describe ``participant_count`` people."""
    seg_total = total(Decimal(seg.count) for seg in segments)
    if seg_total == participant_count:
        return [ParticipantSegment(int(seg.count), seg.device, seg.network) for seg in segments]
    if seg_total == 0:
        return [ParticipantSegment(0, seg.device, seg.network) for seg in segments]
    return [
        ParticipantSegment(
            round_count(Decimal(seg.count) / seg_total * participant_count),
            seg.device,
            seg.network,
        )
        for seg in segments
    ]


class VirtualPowerCalculator:
    """Streaming energy model with injectable intensity tables."""

    def __init__(self,
                 bitrates: Mapping[VideoQuality, Decimal] = BITRATE_KBPS,
                 device_watts: Mapping[DeviceType, Decimal] = DEVICE_WATTS,
                 network_kwh_per_gb: Mapping[NetworkType, Decimal] = NETWORK_KWH_PER_GB,
                 data_centre_kwh_per_gb: Decimal = DATA_CENTRE_KWH_PER_GB,
                 grid_factors: Mapping[str, Decimal] = GRID_FACTORS):
        require_complete(bitrates, VideoQuality, 'bitrates')
        require_complete(device_watts, DeviceType, 'device watts')
        require_complete(network_kwh_per_gb, NetworkType, 'network intensities')
        self.bitrates = bitrates
        self.device_watts = device_watts
        self.network_kwh_per_gb = network_kwh_per_gb
        self.data_centre_kwh_per_gb = data_centre_kwh_per_gb
        self.grid_factors = grid_factors

    def calculate(self, raw_input: Any) -> VirtualPowerEmissionResult:
        """
        Estimate CO2e from a virtual or hybrid event's streaming activity

        Args:
            raw_input: VirtualPowerInput or a mapping with participantCount,
                durationHours and the optional quality / grid / segment fields

        Returns:
            VirtualPowerEmissionResult: totals, per-layer breakdown and notes
        """
        data = VirtualPowerInput.from_value(raw_input)
        hours = data.duration_hours
        quality = data.quality
        bitrate = self.bitrates[quality]
        participant_grid = (
            data.participant_grid_factor if data.participant_grid_factor is not None
            else self.grid_factors[DEFAULT_PARTICIPANT_GRID]
        )
        dc_grid = (
            data.data_centre_grid_factor if data.data_centre_grid_factor is not None
            else self.grid_factors[DEFAULT_DATA_CENTRE_GRID]
        )
        dc_kwh_per_gb = (
            data.custom_datacentre_kwh_per_gb if data.custom_datacentre_kwh_per_gb is not None
            else self.data_centre_kwh_per_gb
        )

        if data.participant_segments:
            segments = rescale_segments(data.participant_count, data.participant_segments)
            profile = 'user-provided segment breakdown'
        else:
            defaults = [ParticipantSegment(count, device, network)
                        for count, device, network in DEFAULT_SEGMENT_PROFILE]
            segments = rescale_segments(data.participant_count, defaults)
            profile = 'default profile (' + ', '.join(
                f'{count}% {device.value}/{network.value}'
                for count, device, network in DEFAULT_SEGMENT_PROFILE
            ) + ')'

        gb_per_hour = bitrate_to_gb_per_hour(bitrate)
        total_data_gb = gb_per_hour * data.participant_count * hours

        # Layer 1: devices
        device_kwh = Decimal('0')
        details = []
        for seg in segments:
            watts = self.device_watts[seg.device]
            kwh = watts / 1000 * hours * seg.count
            device_kwh += kwh
            details.append(f'{seg.count}x {seg.device.value} @ {watts}W x {hours}h = {kwh:.2f} kWh')

        # Layer 2: network, per connection type
        network_kwh = Decimal('0')
        for seg in segments:
            if seg.network == NetworkType.FIXED and data.custom_fixed_network_kwh_per_gb is not None:
                intensity = data.custom_fixed_network_kwh_per_gb
            else:
                intensity = self.network_kwh_per_gb[seg.network]
            network_kwh += gb_per_hour * seg.count * hours * intensity

        # Layer 3: data centre, every stream once
        dc_kwh = total_data_gb * dc_kwh_per_gb

        by_layer = [
            LayerBreakdown('devices', round3(device_kwh), round3(device_kwh * participant_grid),
                           '; '.join(details)),
            LayerBreakdown('network', round3(network_kwh), round3(network_kwh * participant_grid),
                           f'{total_data_gb:.3f} GB total data x network intensity by '
                           'connection type'),
            LayerBreakdown('data_centre', round3(dc_kwh), round3(dc_kwh * dc_grid),
                           f'{total_data_gb:.3f} GB x {dc_kwh_per_gb} kWh/GB x '
                           f'{dc_grid} kg CO2e/kWh'),
        ]

        return VirtualPowerEmissionResult(
            total_kg_co2e=total(layer.total_kg_co2e for layer in by_layer),
            total_kwh=total(layer.total_kwh for layer in by_layer),
            total_data_gb=round3(total_data_gb),
            by_layer=by_layer,
            segments=segments,
            assumptions={
                'quality': quality.value,
                'bitrateKbps': float(bitrate),
                'participantGridFactor': float(participant_grid),
                'dataCentreGridFactor': float(dc_grid),
                'deviceProfile': profile,
            },
            source=VIRTUAL_POWER_CITATION,
            factor_year=VIRTUAL_POWER_FACTOR_YEAR,
            notes=generate_virtual_power_insights(
                by_layer, segments, quality, data.participant_count),
        )


_default_calculator = VirtualPowerCalculator()


def calculate_virtual_power_emissions(raw_input: Any) -> VirtualPowerEmissionResult:
    return _default_calculator.calculate(raw_input)
