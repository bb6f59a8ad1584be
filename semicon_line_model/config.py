"""
Configuration for the assembly-line capacity experiments.

Times are in seconds, outputs in units (packaged semiconductors).
The line calibration itself (distribution ranges, regression fit) lives in
calibration.py.
"""

# Line layout and working windows
MACHINES = 3
SECONDS_PER_DAY = 60 * 60 * 24
SECONDS_PER_YEAR = 365 * SECONDS_PER_DAY

# World output in 2021 and its expected growth
TARGET_2021 = 1_140_000_000_000
GROWTH_RATE = 0.0625
GROWTH_YEARS = 5

# Capacity search
N_RUNS = 10
STEP_EXP2 = 500
STEP_EXP3 = 50
MAX_SEARCH_ITERATIONS = 100_000

# Quick mode (dev / smoke test): same procedure, 1/1000 of the target
N_RUNS_QUICK = 2
TARGET_SCALE_QUICK = 1e-3
STEP_EXP2_QUICK = 5
STEP_EXP3_QUICK = 1

# Validation
N_VALIDATION_SAMPLES = 21

# Sampling
TAIL_PROBABILITY = 0.05
TRUNCATE_DIGITS = 3
MAX_REJECTION_ROUNDS = 1_000

# Randomness
BASE_SEED = 20211208
