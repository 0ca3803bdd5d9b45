"""GET/PUT /v1/settings/{key} - key/value configuration"""

from fastapi import APIRouter, Depends

from petty_cash.api.dependencies import get_actor, get_settings_service
from petty_cash.api.v1.schemas import SettingResponse, SettingUpdate
from petty_cash.domain.models import Actor
from petty_cash.services.settings import SettingsService

router = APIRouter()


@router.get("/settings/{key}", response_model=SettingResponse, dependencies=[Depends(get_actor)])
def get_setting(key: str, service: SettingsService = Depends(get_settings_service)):
    return service.get(key)


@router.put("/settings/{key}", response_model=SettingResponse)
def put_setting(
    key: str,
    body: SettingUpdate,
    actor: Actor = Depends(get_actor),
    service: SettingsService = Depends(get_settings_service),
):
    return service.set(actor, key, body.value)
