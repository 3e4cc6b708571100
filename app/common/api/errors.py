import logging
from functools import wraps

from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.requests import Request
from starlette.responses import JSONResponse

from app.exceptions import IrisError, UnexpectedError

logger = logging.getLogger('iris.api')


def handle_errors(func):
    """
    Wraps a route handler so that any failure reaches the client as `{"error": message}`.

    IrisError subclasses already know their status code and pass straight through; anything else is logged and
    turned into an UnexpectedError (500).
    """

    @wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            return await func(*args, **kwargs)
        except IrisError:
            raise
        except Exception as e:
            logger.error(f'Unexpected error in {func.__name__}: {e}', exc_info=True)
            raise UnexpectedError(str(e) or e.__class__.__name__) from e

    return wrapper


async def iris_error_handler(request: Request, exc: IrisError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.warning(f'{request.method} {request.url.path} failed: {exc}')
    return JSONResponse({'error': str(exc)}, status_code=exc.status_code)


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Routing errors (404, 405) in the same `{"error": message}` shape as everything else"""
    return JSONResponse({'error': str(exc.detail)}, status_code=exc.status_code, headers=exc.headers)
