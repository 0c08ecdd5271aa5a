from pathlib import Path

CONFIG_FILE_PATH = Path(__file__).resolve().parent.parent / "config" / "config.yaml"

PAD_TOKEN = "<PAD>"
OOV_TOKEN = "<OOV>"
PAD_INDEX = 0
OOV_INDEX = 1

DEFAULT_MAX_LENGTH = 50
