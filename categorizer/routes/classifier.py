import asyncio
import logging

from dishka import FromDishka
from dishka.integrations.fastapi import DishkaRoute, inject
from fastapi import APIRouter, WebSocket
from starlette.websockets import WebSocketDisconnect

from categorizer.schemas.classifier import (
    ClassifierStateSchema,
    PredictRequestSchema,
    PredictResponseSchema,
    TrainResponseSchema,
)
from categorizer.services.classifier.lifecycle import (
    ClassifierLifecycleManager,
    LifecycleState,
)

router = APIRouter(prefix="/classifier", tags=["classifier"], route_class=DishkaRoute)
logger = logging.getLogger(__name__)


@router.get("/state")
async def classifier_state(
    manager: FromDishka[ClassifierLifecycleManager],
) -> ClassifierStateSchema:
    return ClassifierStateSchema.model_validate(manager.state)


@router.post("/predict")
async def predict_category(
    payload: PredictRequestSchema,
    manager: FromDishka[ClassifierLifecycleManager],
) -> PredictResponseSchema:
    category = await manager.predict_category(payload.description)
    return PredictResponseSchema(category=category)


@router.post("/train")
async def train_model(
    manager: FromDishka[ClassifierLifecycleManager],
) -> TrainResponseSchema:
    outcome = await manager.train_model()
    return TrainResponseSchema(
        outcome=outcome,
        state=ClassifierStateSchema.model_validate(manager.state),
    )


@router.websocket("/state/ws")
@inject
async def classifier_state_ws(
    socket: WebSocket,
    manager: FromDishka[ClassifierLifecycleManager],
):
    await socket.accept()
    states: asyncio.Queue[LifecycleState] = asyncio.Queue()
    unsubscribe = manager.subscribe(states.put_nowait)
    try:
        state = manager.state
        while True:
            await socket.send_json(
                ClassifierStateSchema.model_validate(state).model_dump(mode="json")
            )
            state = await states.get()
    except WebSocketDisconnect:
        logger.debug("Classifier state socket disconnected")
    finally:
        unsubscribe()
