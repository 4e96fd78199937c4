from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List
from .. import models, schemas
from ..database import get_db

router = APIRouter(prefix="/task-templates", tags=["task-templates"])

# Default durations (hours per unit) for stair work
DEFAULT_TEMPLATES = {
    "building steps with 4-inch blocks": {"unit": "pieces", "estimated_hours": 0.25},
    "building steps with 7-inch blocks": {"unit": "pieces", "estimated_hours": 0.3},
    "building steps with bricks": {"unit": "pieces", "estimated_hours": 0.05},
    "cutting 30cm porcelain slab": {"unit": "piece", "estimated_hours": 0.1},
    "cutting 60cm porcelain slab": {"unit": "piece", "estimated_hours": 0.15},
    "cutting 90cm porcelain slab": {"unit": "piece", "estimated_hours": 0.2},
    "cutting 120cm porcelain slab": {"unit": "piece", "estimated_hours": 0.25},
    "cutting 30cm granite slab": {"unit": "piece", "estimated_hours": 0.15},
    "cutting 60cm granite slab": {"unit": "piece", "estimated_hours": 0.2},
    "cutting 90cm granite slab": {"unit": "piece", "estimated_hours": 0.3},
    "cutting 120cm granite slab": {"unit": "piece", "estimated_hours": 0.35},
    "tile installation 30 x 30": {"unit": "pieces", "estimated_hours": 0.2},
    "tile installation 60 x 30": {"unit": "pieces", "estimated_hours": 0.3},
    "tile installation 60 x 60": {"unit": "pieces", "estimated_hours": 0.4},
    "tile installation 90 x 60": {"unit": "pieces", "estimated_hours": 0.5},
    "tile installation 120 x 30": {"unit": "pieces", "estimated_hours": 0.5},
    "mixing mortar": {"unit": "batch", "estimated_hours": 0.5},
}


def seed_defaults(db: Session) -> int:
    """Add any default template that is missing by name. Returns how many were added."""
    seeded = 0
    for name, data in DEFAULT_TEMPLATES.items():
        existing = db.query(models.TaskTemplate).filter(models.TaskTemplate.name == name).first()
        if not existing:
            db.add(models.TaskTemplate(name=name, **data))
            seeded += 1
    db.commit()
    return seeded


@router.get("/seed")
def seed_task_templates(db: Session = Depends(get_db)):
    """Seed default task templates. Safe to run multiple times — skips existing."""
    return {"ok": True, "seeded": seed_defaults(db)}


@router.get("/", response_model=List[schemas.TaskTemplate])
def list_task_templates(db: Session = Depends(get_db)):
    return db.query(models.TaskTemplate).order_by(models.TaskTemplate.id).all()


@router.post("/", response_model=schemas.TaskTemplate, status_code=201)
def create_task_template(template: schemas.TaskTemplateCreate, db: Session = Depends(get_db)):
    existing = db.query(models.TaskTemplate).filter(models.TaskTemplate.name == template.name).first()
    if existing:
        raise HTTPException(status_code=409, detail=f"Task template already exists: {template.name}")
    db_template = models.TaskTemplate(**template.model_dump())
    db.add(db_template)
    db.commit()
    db.refresh(db_template)
    return db_template


@router.patch("/{template_id}", response_model=schemas.TaskTemplate)
def update_task_template(
    template_id: int,
    update: schemas.TaskTemplateUpdate,
    db: Session = Depends(get_db)
):
    template = db.query(models.TaskTemplate).filter(models.TaskTemplate.id == template_id).first()
    if not template:
        raise HTTPException(status_code=404, detail="Task template not found — run /task-templates/seed first")
    for key, value in update.model_dump(exclude_unset=True).items():
        setattr(template, key, value)
    db.commit()
    db.refresh(template)
    return template
