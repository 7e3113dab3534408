"""FastAPI web adapter for the CHIP-8 core."""

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel, Field
from typing import Optional
from pathlib import Path

from chip8 import run_rom, RunOptions, KeyEvent
from chip8.instructions import disassemble
from chip8.memory import MAX_ROM_SIZE, PROGRAM_START


# Constants
STATIC_DIR = Path(__file__).parent.parent / "static"


# Request/Response models
class KeyEventModel(BaseModel):
    frame: int = Field(ge=0)
    key: int = Field(ge=0, le=15)
    pressed: bool = True


class RunOptionsModel(BaseModel):
    frames: int = Field(default=60, ge=1, le=3600)
    ticks_per_frame: int = Field(default=10, ge=1, le=1000)
    seed: Optional[int] = None
    key_events: list[KeyEventModel] = Field(default_factory=list)
    trace: bool = False
    trace_limit: int = Field(default=1000, ge=0, le=100000)
    stop_when_waiting: bool = False


class RunRequest(BaseModel):
    rom: str
    options: Optional[RunOptionsModel] = None


class DisassembleRequest(BaseModel):
    rom: str


class RunResponse(BaseModel):
    status: str
    ticks_executed: int
    frames_executed: int
    final_state: dict
    display: list[str]
    sound_events: int
    trace: list[dict]
    error: Optional[dict] = None


class DisassembledLine(BaseModel):
    addr: int
    opcode: int
    text: str


def parse_rom(rom_hex: str) -> bytes:
    """Decode a hex ROM string, ignoring whitespace."""
    try:
        rom = bytes.fromhex("".join(rom_hex.split()))
    except ValueError:
        raise HTTPException(status_code=400, detail="ROM must be a hex string")
    if len(rom) > MAX_ROM_SIZE:
        raise HTTPException(
            status_code=400,
            detail=f"ROM size exceeds limit of {MAX_ROM_SIZE} bytes",
        )
    return rom


# Create FastAPI app
app = FastAPI(
    title="CHIP-8 Interpreter",
    description="Web API for running CHIP-8 ROMs headlessly",
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


@app.post("/api/run", response_model=RunResponse)
async def run_code(request: RunRequest):
    """Run a CHIP-8 ROM for a number of frames.

    Args:
        request: Hex-encoded ROM and execution options

    Returns:
        Execution result with display rows, trace and final state
    """
    rom = parse_rom(request.rom)

    opts = request.options or RunOptionsModel()
    run_opts = RunOptions(
        frames=opts.frames,
        ticks_per_frame=opts.ticks_per_frame,
        seed=opts.seed,
        key_events=[
            KeyEvent(frame=e.frame, key=e.key, pressed=e.pressed)
            for e in opts.key_events
        ],
        trace=opts.trace,
        trace_limit=opts.trace_limit,
        stop_when_waiting=opts.stop_when_waiting,
    )

    result = run_rom(rom, options=run_opts)
    return result.to_dict()


@app.post("/api/disassemble", response_model=list[DisassembledLine])
async def disassemble_rom(request: DisassembleRequest):
    """List the ROM as instructions starting at 0x200."""
    rom = parse_rom(request.rom)
    lines = []
    for offset in range(0, len(rom), 2):
        pair = rom[offset:offset + 2]
        if len(pair) == 2:
            word = (pair[0] << 8) | pair[1]
            text = disassemble(word)
        else:
            word = pair[0]
            text = f"DB {word:#04x}"
        lines.append({"addr": PROGRAM_START + offset, "opcode": word, "text": text})
    return lines


# Mount static files AFTER API routes to prevent shadowing
if STATIC_DIR.exists():
    app.mount("/", StaticFiles(directory=str(STATIC_DIR), html=True), name="static")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8080)
