"""
Run the API on Windows with ProactorEventLoop.

uvicorn forces SelectorEventLoop on Windows, which can raise WinError 10038
when clients drop connections while a slow Bible API call is in flight.
Run: python run_win.py
"""
import asyncio
import os
import sys

if __name__ == "__main__":
    if sys.platform != "win32":
        print("run_win.py is for Windows only. Use: uvicorn app.main:app --host 0.0.0.0 --port 8000 --reload")
        sys.exit(1)

    asyncio.set_event_loop_policy(asyncio.WindowsProactorEventLoopPolicy())

    # Keep uvicorn from switching back to SelectorEventLoop
    import uvicorn.loops.asyncio as uv_asyncio

    def _keep_policy(use_subprocess: bool = False) -> None:
        pass

    uv_asyncio.asyncio_setup = _keep_policy

    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=os.environ.get("UVICORN_HOST", "0.0.0.0"),
        port=int(os.environ.get("UVICORN_PORT", "8000")),
        reload=os.environ.get("UVICORN_RELOAD", "0") == "1",
        log_level=os.environ.get("UVICORN_LOG_LEVEL", "info"),
    )
