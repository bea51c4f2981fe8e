"""本地运行入口：在项目根目录执行 python -m filesync（需先 pip install -e . 或 PYTHONPATH=src）。"""

if __name__ == "__main__":
    import uvicorn

    from filesync.core.config import get_settings

    settings = get_settings()
    uvicorn.run(
        "filesync.main:app",
        host="0.0.0.0",
        port=settings.port,
        timeout_keep_alive=15,
        log_config=None,
    )
