"""Allow ``python -m usb_audio_monitor`` to launch the monitor."""

import sys

from usb_audio_monitor.cli import main

if __name__ == "__main__":
    sys.exit(main())
