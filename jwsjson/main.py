import logging
import time

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from jwsjson.logging_config import configure_logging
from jwsjson.jws.api_models import (
    ERROR_RECOVERABILITY,
    ErrorDetail,
    VerifyRequest,
    VerifyResponse,
)
from jwsjson.jws.exceptions import FormatError, JwsError
from jwsjson.jws.parser import parse_jws_json
from jwsjson.jws.verifiers import verifier_from_jwk

configure_logging()
log = logging.getLogger("jwsjson")

app = FastAPI(title="JWS JSON Verifier", version="0.1.0")


def to_error_detail(error: JwsError) -> ErrorDetail:
    return ErrorDetail(
        code=error.code,
        message=error.message,
        recoverable=ERROR_RECOVERABILITY.get(error.code, True),
    )


@app.get("/healthz")
def healthz():
    return {"ok": True}

@app.middleware("http")
async def req_log(request: Request, call_next):
    start = time.time()
    route = request.url.path
    remote = request.client.host if request.client else "-"
    resp = await call_next(request)
    duration_ms = int((time.time() - start) * 1000)
    log.info(f"request_complete status={resp.status_code} duration_ms={duration_ms}",
             extra={"request_id":"-", "route":route, "remote_addr":remote})
    return resp

@app.post("/verify")
def verify(req: VerifyRequest, request: Request):
    """Verify a JSON JWS against the supplied JWKs.

    The document is accepted only when every signature entry is validated by
    a distinct key. Keys that cannot be turned into verifiers are reported in
    ``errors`` and force ``verified=false``; a document that does not parse
    is rejected with 400.
    """
    try:
        document = parse_jws_json(req.document, req.detached_payload)
    except FormatError as e:
        return JSONResponse(status_code=400, content={"detail": to_error_detail(e).model_dump()})

    algorithms = req.algorithms or []
    errors: list[ErrorDetail] = []
    verifiers = []
    for position, jwk in enumerate(req.keys):
        alg = algorithms[position] if position < len(algorithms) else None
        try:
            verifiers.append(verifier_from_jwk(jwk, alg))
        except JwsError as e:
            log.warning(f"keys[{position}] rejected: {e.message}", extra={"code": e.code})
            errors.append(to_error_detail(e))

    result = document.check_all_with(verifiers)
    if result.issue is not None and not errors:
        errors.append(ErrorDetail(
            code=result.issue.code,
            message=result.issue.message,
            recoverable=ERROR_RECOVERABILITY.get(result.issue.code, True),
        ))

    entries = document.signature_entries
    unclaimed = {id(entry) for entry in result.non_validated}
    resp = VerifyResponse(
        verified=result.verified and not errors,
        signature_count=len(entries),
        algorithms=[entry.algorithm for entry in entries],
        non_validated=[i for i, entry in enumerate(entries) if id(entry) in unclaimed],
        errors=errors or None,
    )
    log.info(f"verify_called verified={resp.verified} signatures={resp.signature_count}",
             extra={"route": "/verify",
                    "remote_addr": request.client.host if request.client else "-"})
    return JSONResponse(resp.model_dump())


@app.get("/admin")
def admin():
    """Return effective configuration for operators.

    Gated by ADMIN_ENDPOINT_ENABLED.
    """
    from jwsjson.core.config import (
        ADMIN_ENDPOINT_ENABLED,
        ALLOWED_ALGORITHMS,
        MIN_HMAC_KEY_BYTES,
        SUPPORTED_ALGORITHMS,
    )

    if not ADMIN_ENDPOINT_ENABLED:
        return JSONResponse(
            status_code=404,
            content={"detail": "Admin endpoint disabled"}
        )

    return {
        "normative": {
            "supported_algorithms": sorted(SUPPORTED_ALGORITHMS),
        },
        "configurable": {
            "allowed_algorithms": sorted(ALLOWED_ALGORITHMS),
            "min_hmac_key_bytes": MIN_HMAC_KEY_BYTES,
        },
        "environment": {
            "log_level": logging.getLogger().getEffectiveLevel(),
            "log_level_name": logging.getLevelName(logging.getLogger().getEffectiveLevel()),
        },
    }
