"""FastAPI web adapter for the CHIP-8 virtual machine."""

import logging
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel, Field
from typing import Optional
from pathlib import Path

from chip8 import run_program, RunOptions
from chip8.keypad import key_for
from chip8.memory import RAM_SIZE, PROGRAM_START

log = logging.getLogger(__name__)

# Constants
MAX_PROGRAM_SIZE = RAM_SIZE - PROGRAM_START
STATIC_DIR = Path(__file__).parent.parent / "static"


# Request/Response models
class RunOptionsModel(BaseModel):
    frames: int = Field(default=60, ge=0, le=3600)
    ticks_per_frame: int = Field(default=10, ge=1, le=1000)
    max_steps: int = Field(default=100000, ge=1, le=1000000)
    keys: list[int] = Field(default_factory=list)
    keyboard: str = ""
    seed: Optional[int] = None
    legacy_skip_not_equal: bool = False
    trace: bool = True
    trace_limit: int = Field(default=1000, ge=0, le=100000)
    trace_include_registers: bool = False


class RunRequest(BaseModel):
    rom_hex: str
    options: Optional[RunOptionsModel] = None


class RunResponse(BaseModel):
    status: str
    frames_executed: int
    steps_executed: int
    final_state: dict
    display: list[str]
    sound_active: bool
    trace: list[dict]
    error: Optional[dict] = None


# Create FastAPI app
app = FastAPI(
    title="CHIP-8 Virtual Machine",
    description="Web API for running CHIP-8 program images headlessly",
    version="0.1.0",
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _decode_rom(rom_hex: str) -> bytes:
    try:
        return bytes.fromhex(rom_hex)
    except ValueError:
        raise HTTPException(status_code=400, detail="rom_hex is not valid hexadecimal")


def _resolve_keys(opts: RunOptionsModel) -> list[int]:
    keys = list(opts.keys)
    for char in opts.keyboard:
        key = key_for(char)
        if key is None:
            raise HTTPException(
                status_code=400,
                detail=f"Keyboard character not mapped to a key: {char!r}",
            )
        keys.append(key)
    for key in keys:
        if not 0 <= key <= 0xF:
            raise HTTPException(status_code=400, detail=f"Invalid key index: {key}")
    return sorted(set(keys))


@app.post("/api/run", response_model=RunResponse)
async def run_rom(request: RunRequest):
    """Run a CHIP-8 program image.

    Args:
        request: Hex-encoded program image and execution options

    Returns:
        Execution result with final state, rendered display and trace
    """
    program = _decode_rom(request.rom_hex)

    # Validate program size
    if len(program) > MAX_PROGRAM_SIZE:
        raise HTTPException(
            status_code=400,
            detail=f"Program size exceeds limit of {MAX_PROGRAM_SIZE} bytes",
        )

    # Build options
    opts = request.options or RunOptionsModel()

    run_opts = RunOptions(
        frames=opts.frames,
        ticks_per_frame=opts.ticks_per_frame,
        max_steps=opts.max_steps,
        keys=_resolve_keys(opts),
        seed=opts.seed,
        legacy_skip_not_equal=opts.legacy_skip_not_equal,
        trace=opts.trace,
        trace_limit=opts.trace_limit,
        trace_include_registers=opts.trace_include_registers,
    )

    log.info("POST /api/run: %d bytes, %d frames", len(program), run_opts.frames)
    result = run_program(program, options=run_opts)

    return result.to_dict()


# Mount static files AFTER API routes to prevent shadowing
if STATIC_DIR.exists():
    app.mount("/", StaticFiles(directory=str(STATIC_DIR), html=True), name="static")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8080)
