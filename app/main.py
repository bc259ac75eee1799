from typing import List, Optional

from fastapi import FastAPI, File, HTTPException, Query, UploadFile

from app.cleaner import clean_cs_code
from remover_core.config import DEFAULT_TARGET_SYMBOL, REVIEW_SENTINEL, ProcessingOptions
from remover_core.utils.log import get_logger

logger = get_logger("app")

app = FastAPI(title="cond-remover")


@app.get("/")
def service_info():
    return {
        "service": "cond-remover",
        "default_target": DEFAULT_TARGET_SYMBOL,
        "review_sentinel": REVIEW_SENTINEL,
        "endpoints": ["POST /clean"],
    }


@app.post("/clean")
async def clean(
    file: UploadFile = File(...),
    target: Optional[str] = Query(None),
    define: List[str] = Query([]),
    include_generated: bool = Query(False),
):
    if not file.filename or not file.filename.endswith(".cs"):
        raise HTTPException(status_code=400, detail="Only .cs files allowed")

    code = await file.read()
    try:
        code.decode("utf-8")
    except UnicodeDecodeError:
        raise HTTPException(status_code=400, detail="File is not valid UTF-8")

    options = ProcessingOptions(
        target_symbol=target or DEFAULT_TARGET_SYMBOL,
        additional_defines=tuple(define),
        include_generated=include_generated,
    )
    logger.info(f"clean upload {file.filename} target={options.target_symbol}")
    return clean_cs_code(code, file.filename, options)
