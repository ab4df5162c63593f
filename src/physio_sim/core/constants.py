"""Physiological constants and model breakpoints for the simulator."""

# Time conversions
SECONDS_PER_MINUTE = 60.0
SECONDS_PER_DAY = 86400.0

# Generic tissue state machine (supply ratio = O2 delivery / O2 demand)
TISSUE_HYPOPERFUSION_RATIO = 0.9
TISSUE_ISCHEMIA_RATIO = 0.6
TISSUE_REPERFUSION_RATIO = 0.8
TISSUE_HYPOPERFUSION_LIMIT_S = 600.0  # 10 min of hypoperfusion → ischemia
TISSUE_REVERSIBLE_ISCHEMIA_S = 300.0  # reperfusion within 5 min fully recovers
TISSUE_ISCHEMIA_LIMIT_S = 1800.0  # 30 min of ischemia → injury
TISSUE_INJURY_HEAL_RATE = 0.0001  # severity lost per second when perfused
TISSUE_INJURY_WORSEN_RATE = 0.0002  # severity gained per second when ischemic
TISSUE_NECROSIS_DURATION_S = 3600.0
TISSUE_NECROSIS_SEVERITY = 0.8
TISSUE_HEALED_SEVERITY = 0.1
TISSUE_O2_PER_GRAM = 0.05  # mL O2/min per gram at baseline

# Myocardial cellular state machine
MYOCARDIAL_INJURY_ONSET_S = 1200.0  # 20 min ischemia → injured
MYOCARDIAL_NECROSIS_ONSET_S = 3600.0  # 60 min injured + ischemic → necrotic
MYOCARDIAL_REVERSIBLE_ISCHEMIA_S = 300.0
MYOCARDIAL_INJURY_RECOVERY_S = 7200.0  # 2 h of reperfusion reverses injury
MYOCARDIAL_O2_PER_GRAM = 0.1  # mL O2/min per gram
MYOCARDIAL_FLOW_PER_GRAM = 1.0  # mL/min per gram

# Metabolites
LACTATE_PER_O2_DEFICIT = 0.01
ADENOSINE_PER_O2_DEFICIT = 0.005
LACTATE_WASHOUT = 0.95  # per-second retention when perfused
ADENOSINE_WASHOUT = 0.90

# Troponin kinetics
TROPONIN_INJURY_DELAY_S = 10800.0  # 3 h into injury before release
TROPONIN_INJURY_RATE = 0.01  # ng/mL per second
TROPONIN_NECROSIS_RATE = 0.05
TROPONIN_PEAK_DAYS = 2.0
TROPONIN_DECAY = 0.98

# Ectopy
AUTOMATICITY_ONSET_S = 600.0
AUTOMATICITY_RAMP_S = 1800.0
MAX_AUTOMATICITY_PER_MIN = 30.0
ECTOPIC_BEAT_WINDOW_S = 2.0

# Q waves develop half a day after necrosis
Q_WAVE_ONSET_DAYS = 0.5

# Rhythm thresholds
PVC_TO_VT_INJURED_SEGMENTS = 2
PVC_TO_VT_ECTOPIC_BEATS = 5
VT_TO_VF_DURATION_S = 60.0
VT_TO_VF_INJURED_SEGMENTS = 3
VF_TO_ASYSTOLE_DURATION_S = 300.0
VF_TO_ASYSTOLE_NECROTIC_SEGMENTS = 4
VT_RATE_RANGE_BPM = (150.0, 200.0)
VF_RATE_RANGE_BPM = (250.0, 350.0)
SINUS_TACHY_BPM = 100.0
SINUS_BRADY_BPM = 60.0

# Heart mechanics
RESTING_HEART_RATE_BPM = 75.0
MIN_HEART_RATE_BPM = 40.0
MAX_SINUS_RATE_BPM = 150.0
BASELINE_EJECTION_FRACTION = 60.0
END_DIASTOLIC_VOLUME_ML = 120.0
MAX_CHEST_PAIN = 10.0
TOXIN_CARDIODEPRESSION_AU = 50.0

# Coronary circulation
CORONARY_ARTERIES = ("LAD", "LCx", "RCA")
DEFAULT_CORONARY_FLOWS = {"LAD": 40.0, "LCx": 30.0, "RCA": 35.0}  # mL/min
CORONARY_FLOW_RESERVE = 4.0

# Segment masses (grams); LV ≈ 200 g, RV ≈ 50 g
SEGMENT_MASS_GRAMS = {
    "anterior": 50.0,
    "septal": 40.0,
    "lateral": 40.0,
    "inferior": 40.0,
    "posterior": 30.0,
    "right_ventricular": 50.0,
}

# Vascular network
ARTERIAL_FLOW_FRACTION = 0.25  # share of cardiac output carried by named arteries
VENOUS_FLOW_FRACTION = 0.3
POISEUILLE_FLOW_SCALE = 100.0
PLAQUE_LUMEN_FACTOR = 0.8
MAX_PLAQUE = 0.99
MAX_THROMBOTIC_PLAQUE = 0.95
VULNERABLE_PLAQUE = 0.3
THROMBUS_BURDEN = 0.5
CRITICAL_STENOSIS = 0.7
TONE_DIAMETER_FACTOR = 0.5
MIN_RADIUS_MM = 1e-3
TPR_RANGE = (0.5, 3.0)
DEFAULT_CARDIAC_OUTPUT_L_MIN = 5.0

# ECG
VALID_LEAD_COUNTS = (3, 5, 12)
DEFAULT_LEAD_COUNT = 12
DEFAULT_ECG_BUFFER = 1000
VF_NOISE_AMPLITUDE = 0.3
ASYSTOLE_NOISE_AMPLITUDE = 0.01
MM_TO_MV = 0.1  # 10 mm/mV standard calibration
