from mangum import Mangum
import logging
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from fansnap.api import app
from fansnap.settings import S

logging.basicConfig(level=S.log_level)

handler = Mangum(app)
