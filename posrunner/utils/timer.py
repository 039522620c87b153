from datetime import datetime

from posrunner.logger import logger

class Timer:
    def __init__(self, label="Run"):
        self.label = label
        self.interval = 0

    def __enter__(self):
        self.start_time = datetime.now()
        return self

    def __exit__(self, *args):
        self.end_time = datetime.now()
        self.interval = (self.end_time - self.start_time).total_seconds()
        self.interval = round(self.interval, 2)

        logger.debug(f"{self.label} finished in {self.interval} seconds.")
