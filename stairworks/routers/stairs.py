import logging
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List

from .. import models, schemas
from ..calculators.registry import get_calculator
from ..calculators.stair_geometry import StairInputError
from ..calculators.unit_library import SLAB_SIZES, UNIT_LIBRARY
from ..config import settings
from ..database import get_db

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/stairs", tags=["stairs"])


def _calculator(name: str = "standard_stair"):
    try:
        return get_calculator(
            name,
            adhesive_kg_per_m2_per_cm=settings.ADHESIVE_KG_PER_M2_PER_CM,
            adhesive_bag_kg=settings.ADHESIVE_BAG_KG,
            mortar_batch_kg=settings.MORTAR_BATCH_KG,
            default_slab_type=settings.DEFAULT_SLAB_TYPE,
        )
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/calculate", response_model=schemas.StairEstimate)
def calculate_stair(body: schemas.StairSpecificationIn, db: Session = Depends(get_db)):
    """Courses, slabs, materials and labour for one straight stair."""
    calculator = _calculator()
    if body.task_templates is not None:
        templates = body.task_templates
    else:
        templates = db.query(models.TaskTemplate).order_by(models.TaskTemplate.id).all()

    try:
        return calculator.estimate(body.to_spec(settings.DEFAULT_SLAB_TYPE), templates)
    except StairInputError as e:
        logger.info("Rejected stair input: %s", e)
        raise HTTPException(status_code=422, detail=str(e))


@router.post("/calculate/{calculator_name}")
def calculate_with(calculator_name: str, fields: dict, db: Session = Depends(get_db)):
    """Run a registered calculator on a loose fields dict."""
    calculator = _calculator(calculator_name)
    if "task_templates" not in fields:
        fields = dict(fields)
        fields["task_templates"] = db.query(models.TaskTemplate).order_by(models.TaskTemplate.id).all()
    try:
        return calculator.calculate(fields)
    except StairInputError as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.get("/units", response_model=List[schemas.UnitMaterialOut])
def list_units():
    return [
        {
            "id": unit.id,
            "name": unit.name,
            "kind": unit.kind.value,
            "height": unit.height,
            "width": unit.width,
            "length": unit.length,
            "orientations": [o.value for o in unit.allowed_orientations()],
        }
        for unit in UNIT_LIBRARY.values()
    ]


@router.get("/slab-sizes", response_model=List[schemas.SlabSizeOut])
def list_slab_sizes():
    return [
        {"size": slab.size, "width": slab.width, "length": slab.length}
        for slab in SLAB_SIZES.values()
    ]
