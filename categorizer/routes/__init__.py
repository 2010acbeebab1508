from apscheduler.schedulers.base import BaseScheduler
from dishka import FromDishka
from fastapi import APIRouter
from dishka.integrations.fastapi import DishkaRoute

from categorizer.schemas.health import HealthSchema, JobSchema
from categorizer.routes.classifier import router as classifier_router
from categorizer.routes.transactions import router as transactions_router
from categorizer.routes.ws import router as ws_router


router = APIRouter(route_class=DishkaRoute)
router.include_router(classifier_router)
router.include_router(transactions_router)
router.include_router(ws_router)


@router.get("/health")
async def health(scheduler: FromDishka[BaseScheduler]) -> HealthSchema:
    jobs = [
        JobSchema(id=job.id, next_run_time=job.next_run_time, name=job.name)
        for job in scheduler.get_jobs()
    ]
    return HealthSchema(
        status="ok",
        jobs=jobs,
    )
