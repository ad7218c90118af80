"""
Run configuration for the heart failure survival analysis
"""

import os

# Reproducibility
RANDOM_STATE = 123

# File locations
DATA_PATH = os.path.join("data", "heart_failure_clinical_records_dataset.csv")
RESULTS_DIR = os.path.join("results", "experiment_01")

# Dataset schema
LABEL_COLUMN = 'DEATH_EVENT'
FEATURE_COLUMNS = [
    'age',
    'anaemia',
    'creatinine_phosphokinase',
    'diabetes',
    'ejection_fraction',
    'high_blood_pressure',
    'platelets',
    'serum_creatinine',
    'serum_sodium',
    'sex',
    'smoking',
    'time',
]
BINARY_COLUMNS = ['anaemia', 'diabetes', 'high_blood_pressure', 'sex', 'smoking']

# Outcome coding (DEATH_EVENT value -> report label)
CLASS_LABELS = {0: 'Survived', 1: 'Died'}
POSITIVE_LABEL = 1

# Partitioning
TRAIN_FRACTION = 0.7
SCALING = 'train'  # 'train' fits the scaler on the train partition, 'full' on the whole dataset

# Resampling
CV_FOLDS = 10
CV_REPEATS = 1
N_JOBS = 1

# Unsupervised analysis
KMEANS_CLUSTERS = 2
KMEANS_RESTARTS = 25
