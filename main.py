import logging
import sys
from pathlib import Path

from PySide6.QtWidgets import QApplication

ROOT = Path(__file__).resolve().parent
SRC_DIR = ROOT / "src"

if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from core.config import PlayerConfig
from core.state import AppState
from player.player import Player
from player.prefetch import QtAudioPrimer
from player.qt_output import QtAudioOutputDevice
from ui.main_window import MainWindow

logger = logging.getLogger("pulse")


def init_app_state(config: PlayerConfig) -> AppState:
    app_state = AppState(config)
    app_state.player = Player(
        device=QtAudioOutputDevice(),
        primer=QtAudioPrimer(timeout_s=config.asset_timeout_s),
        audio_cache_size=config.audio_cache_size,
        image_cache_size=config.image_cache_size,
    )
    return app_state


def main() -> int:
    config = PlayerConfig.from_env()
    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("Player application initializing (root=%s, manifest=%s)", config.root, config.manifest_source)

    qt_app = QApplication(sys.argv)
    qt_app.setApplicationName("Pulse Player")

    app_state = init_app_state(config)
    main_window = MainWindow(app_state)
    main_window.show()
    main_window.start()

    return qt_app.exec()


if __name__ == "__main__":
    raise SystemExit(main())
