"""Run the Z-Image Discord drawing bot: ``python main.py [--debug|--config-check|--version]``."""
from zimage_bot.main import run

if __name__ == "__main__":
    run()
