import uvicorn
from config import config
from utils.logging_utils import setup_logging


def main(argv=None):
    # CLI first: the app and its services read config at import time
    config.setup_from_args(argv)
    setup_logging(config.debug_mode)

    from main import app

    banner = [
        "=" * 60,
        "Rep Counter Backend",
        "=" * 60,
        f"Mode:             {config.mode_description}",
        f"Default exercise: {config.exercise_name(config.default_mode)}",
        f"Pose model:       {config.pose_model_path}",
        f"Calorie endpoint: {config.calorie_api_url}",
        f"Listening on:     http://{config.host}:{config.port}",
        "",
        "Options: --mode debug|debug_no_save|non_debug  --camera N",
        "         --calorie-url URL  --host HOST  --port PORT",
        "=" * 60,
    ]
    print("\n" + "\n".join(banner) + "\n")

    uvicorn.run(app, host=config.host, port=config.port)


if __name__ == "__main__":
    main()
