from pydantic import BaseModel, Field
from typing import Optional, List, Dict
from datetime import datetime

from .calculators.stair_geometry import (
    CuttingMode, SlabPlacement, StairSpecification, StepConfiguration,
)
from .calculators.unit_library import DEFAULT_SLAB_SIZE, DEFAULT_UNIT_IDS, Orientation


class TaskTemplateBase(BaseModel):
    name: str
    unit: Optional[str] = "piece"
    estimated_hours: Optional[float] = Field(default=None, ge=0)
    notes: Optional[str] = None

class TaskTemplateCreate(TaskTemplateBase):
    pass

class TaskTemplateUpdate(BaseModel):
    unit: Optional[str] = None
    estimated_hours: Optional[float] = Field(default=None, ge=0)
    notes: Optional[str] = None

class TaskTemplate(TaskTemplateBase):
    id: int
    updated_at: Optional[datetime] = None
    class Config:
        from_attributes = True


class StairSpecificationIn(BaseModel):
    """Request body for /stairs/calculate. All lengths in cm."""
    total_height: float = Field(gt=0)
    total_width: float = Field(gt=0)
    step_tread: float = Field(gt=0)
    step_height: float = Field(gt=0)
    slab_thickness_top: float = Field(default=0.0, ge=0)
    slab_thickness_side: float = Field(default=0.0, ge=0)
    slab_thickness_front: float = Field(default=0.0, ge=0)
    overhang_front: float = Field(default=0.0, ge=0)
    overhang_side: float = Field(default=0.0, ge=0)
    build_left: bool = True
    build_right: bool = True
    build_back: bool = False
    step_configuration: StepConfiguration = StepConfiguration.FRONTS_ON_TOP
    gap_between_slabs_mm: float = Field(default=2.0, ge=0)
    unit_material_ids: List[str] = Field(default_factory=lambda: list(DEFAULT_UNIT_IDS))
    cutting_mode: CuttingMode = CuttingMode.ONE_CUT
    slab_size: str = DEFAULT_SLAB_SIZE
    placement: SlabPlacement = SlabPlacement.LONG_WAY
    adhesive_thickness: float = Field(default=0.5, ge=0)
    block_orientation: Orientation = Orientation.FLAT
    brick_orientation: Orientation = Orientation.FLAT
    slab_type: Optional[str] = None
    uniform_burial: bool = False
    carrier_size_tonnes: Optional[float] = Field(default=None, gt=0)
    transport_distance_m: float = Field(default=30.0, ge=0)
    # Overrides the stored duration catalogue for this request
    task_templates: Optional[List[TaskTemplateBase]] = None

    def to_spec(self, default_slab_type: str = "porcelain") -> StairSpecification:
        return StairSpecification(
            total_height=self.total_height,
            total_width=self.total_width,
            step_tread=self.step_tread,
            step_height=self.step_height,
            slab_thickness_top=self.slab_thickness_top,
            slab_thickness_side=self.slab_thickness_side,
            slab_thickness_front=self.slab_thickness_front,
            overhang_front=self.overhang_front,
            overhang_side=self.overhang_side,
            build_left=self.build_left,
            build_right=self.build_right,
            build_back=self.build_back,
            step_configuration=self.step_configuration,
            gap_between_slabs_mm=self.gap_between_slabs_mm,
            unit_material_ids=tuple(self.unit_material_ids),
            cutting_mode=self.cutting_mode,
            slab_size=self.slab_size,
            placement=self.placement,
            adhesive_thickness=self.adhesive_thickness,
            block_orientation=self.block_orientation,
            brick_orientation=self.brick_orientation,
            slab_type=self.slab_type or default_slab_type,
            uniform_burial=self.uniform_burial,
            carrier_size_tonnes=self.carrier_size_tonnes,
            transport_distance_m=self.transport_distance_m,
        )


class UnitMaterialOut(BaseModel):
    id: str
    name: str
    kind: str
    height: float
    width: float
    length: float
    orientations: List[str]

class SlabSizeOut(BaseModel):
    size: str
    width: float
    length: float


class TaskEntry(BaseModel):
    task: str
    hours: float
    amount: float
    unit: str

class StairEstimate(BaseModel):
    """Response of /stairs/calculate. Nested detail stays as plain dicts."""
    calculator: str
    step_count: int
    actual_step_height: float
    total_length: float
    net_step_width: float
    step_dimensions: List[dict]
    courses: List[dict]
    materials: List[dict]
    block_count: int
    mortar_kg: float
    recommended_burial_depth: Optional[float] = None
    uniform_burial_applied: bool = False
    surfaces: List[dict]
    total_slabs: int
    tread_slabs: int
    riser_slabs: int
    total_cuts: int
    top_area_m2: float
    front_area_m2: float
    total_adhesive_kg: float
    adhesive_bags: int
    slab_dimension_histogram: Dict[str, int]
    cuts: dict
    task_breakdown: List[TaskEntry]
    total_hours: float
    remaining_offcuts: List[dict]
    assumptions: List[str] = []
