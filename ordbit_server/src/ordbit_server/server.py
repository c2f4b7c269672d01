"""
HTTP API for deploying, minting and transferring CAT-20 tokens.
"""

from __future__ import annotations

import contextlib
import json
from typing import Any

from aiohttp import web
from catcore.errors import CatError, RevealBroadcastFailed
from catcore.service import TokenService
from loguru import logger
from pydantic import BaseModel, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from ordbit_server.config import Settings


def _amount_to_str(value: Any) -> Any:
    # JSON numbers arrive as float/int; keep their shortest decimal text
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


class DeployPayload(BaseModel):
    token: dict[str, Any]
    fee_rate: float = Field(..., gt=0, alias="feeRate")


class MintOptions(BaseModel):
    id: str = Field(..., min_length=1)
    amount: str | None = None
    merge: bool = False
    new: int | None = None

    @field_validator("amount", mode="before")
    @classmethod
    def normalize_amount(cls, v: Any) -> Any:
        return _amount_to_str(v)


class FeeData(BaseModel):
    fee_rate: float = Field(..., gt=0, alias="feeRate")


class MintPayload(BaseModel):
    options: MintOptions
    data: FeeData


class TransferOptions(BaseModel):
    id: str = Field(..., min_length=1)
    amount: str | None = None

    @field_validator("amount", mode="before")
    @classmethod
    def normalize_amount(cls, v: Any) -> Any:
        return _amount_to_str(v)


class TransferData(FeeData):
    receiver: str
    amount: str

    @field_validator("amount", mode="before")
    @classmethod
    def normalize_amount(cls, v: Any) -> Any:
        return _amount_to_str(v)


class TransferPayload(BaseModel):
    options: TransferOptions
    data: TransferData


class BadRequest(Exception):
    pass


class OrdbitServer:
    def __init__(self, settings: Settings, service: TokenService) -> None:
        self.settings = settings
        self.service = service
        self.app = web.Application()
        self.runner: web.AppRunner | None = None
        self.site: web.TCPSite | None = None
        self._stopping = False
        self._setup_routes()

    def _setup_routes(self) -> None:
        self.app.router.add_get("/v1", self._handle_health)
        self.app.router.add_post("/v1/cat20/deploy", self._handle_deploy)
        self.app.router.add_post("/v1/cat20/mint", self._handle_mint)
        self.app.router.add_post("/v1/cat20/transfer", self._handle_transfer)

    async def _parse(self, request: web.Request, model: type[BaseModel]) -> Any:
        try:
            body = await request.json()
        except json.JSONDecodeError as e:
            raise BadRequest(f"Malformed JSON body: {e}") from e
        try:
            return model.model_validate(body)
        except PydanticValidationError as e:
            raise BadRequest(f"Invalid request: {e}") from e

    async def _run(self, action: str, request: web.Request, model: type[BaseModel], handler):
        try:
            payload = await self._parse(request, model)
            logger.info(f"rcvd request to {action} cat20")
            return await handler(payload)
        except BadRequest as e:
            logger.warning(f"Rejected {action} request: {e}")
            return web.json_response({"message": str(e)}, status=400)
        except RevealBroadcastFailed as e:
            logger.error(
                f"failed to {action} cat20: commit {e.commit_txid} is on the network "
                f"but its reveal was rejected: {e.reason}"
            )
            return web.json_response({"message": f"failed to {action}: {e}"}, status=500)
        except CatError as e:
            logger.error(f"failed to {action} cat20: {type(e).__name__}: {e}")
            return web.json_response({"message": f"failed to {action}: {e}"}, status=500)
        except Exception as e:
            logger.exception(f"Unexpected error during {action}: {e}")
            return web.json_response({"message": f"failed to {action}"}, status=500)

    async def _handle_health(self, _request: web.Request) -> web.Response:
        logger.debug("Health check")
        return web.Response(text="ok", status=200)

    async def _handle_deploy(self, request: web.Request) -> web.Response:
        async def deploy(payload: DeployPayload) -> web.Response:
            result = await self.service.deploy(payload.token, payload.fee_rate)
            logger.info(f"deploy cat20 resp: {result.token_id}")
            return web.json_response(result.model_dump(by_alias=True, exclude_none=True))

        return await self._run("deploy", request, DeployPayload, deploy)

    async def _handle_mint(self, request: web.Request) -> web.Response:
        async def mint(payload: MintPayload) -> web.Response:
            options = payload.options
            result = await self.service.mint(options.id, options.amount, payload.data.fee_rate)
            logger.info(f"mint cat20 resp: {result.txid}")
            return web.json_response(result.txid)

        return await self._run("mint", request, MintPayload, mint)

    async def _handle_transfer(self, request: web.Request) -> web.Response:
        async def transfer(payload: TransferPayload) -> web.Response:
            data = payload.data
            result = await self.service.transfer(
                payload.options.id, data.receiver, data.amount, data.fee_rate
            )
            logger.info(f"transfer cat20 resp: {result.txid}")
            return web.json_response(result.model_dump(by_alias=True))

        return await self._run("transfer", request, TransferPayload, transfer)

    async def start(self) -> None:
        host, port = self.settings.http_host, self.settings.http_port
        logger.info(f"Starting ordbit server on {host}:{port}")

        self.runner = web.AppRunner(self.app)
        await self.runner.setup()

        self.site = web.TCPSite(self.runner, host, port)
        await self.site.start()

        logger.info(f"Ordbit server running at http://{host}:{port}")

    async def stop(self) -> None:
        if self._stopping:
            return
        self._stopping = True

        logger.info("Stopping ordbit server...")

        if self.site:
            with contextlib.suppress(RuntimeError):
                await self.site.stop()
            self.site = None

        if self.runner:
            with contextlib.suppress(RuntimeError):
                await self.runner.cleanup()
            self.runner = None

        await self.service.close()
        logger.info("Ordbit server stopped")
