from .evaluate import run_bh, accelerations, direct_sum
from .forces import *
