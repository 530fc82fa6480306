"""
Constants used throughout the sleep report pipeline.
This includes the summary field tables, display names, epoch metric
definitions, stage/event mappings and severity bands.
"""

# Numeric summary fields, in report order (vendor field names)
summary_data_fields = (
    "total_timeinbed", "total_sleep_time", "asleepduration",
    "lightsleepduration", "remsleepduration", "deepsleepduration",
    "sleep_efficiency", "sleep_latency", "wakeup_latency",
    "wakeupduration", "wakeupcount", "waso",
    "nb_rem_episodes", "apnea_hypopnea_index", "withings_index",
    "durationtosleep", "durationtowakeup", "out_of_bed_count",
    "hr_average", "hr_min", "hr_max",
    "rr_average", "rr_min", "rr_max",
    "snoring", "snoringepisodecount", "sleep_score",
    "mvt_score_avg", "mvt_active_duration",
    "chest_movement_rate_average", "chest_movement_rate_min", "chest_movement_rate_max",
    "breathing_sounds", "breathing_sounds_episode_count",
)

# Fields reported by the vendor in seconds
duration_fields_in_seconds = (
    "total_timeinbed", "total_sleep_time", "asleepduration",
    "lightsleepduration", "remsleepduration", "deepsleepduration",
    "sleep_latency", "wakeup_latency", "wakeupduration", "waso",
    "durationtosleep", "durationtowakeup", "snoring", "mvt_active_duration",
)

# Fields reported as a 0-1 fraction
fraction_fields = ("sleep_efficiency",)

# Display names; the "(hours)" suffix decides hours vs minutes for durations
field_display_names = {
    "total_timeinbed": "Total Time in Bed (hours)",
    "total_sleep_time": "Total Sleep Time (hours)",
    "asleepduration": "Asleep Duration (hours)",
    "lightsleepduration": "Light Sleep (hours)",
    "remsleepduration": "REM Sleep (hours)",
    "deepsleepduration": "Deep Sleep (hours)",
    "sleep_efficiency": "Sleep Efficiency (%)",
    "sleep_latency": "Time to Fall Asleep (minutes)",
    "wakeup_latency": "Time to Wake Up (minutes)",
    "wakeupduration": "Wakeup Duration (minutes)",
    "wakeupcount": "Wakeups (count)",
    "waso": "Wake After Sleep Onset (WASO) (minutes)",
    "nb_rem_episodes": "REM Episodes (count)",
    "apnea_hypopnea_index": "Apnea-Hypopnea Index (events/hour)",
    "withings_index": "Withings Sleep Index",
    "durationtosleep": "Time to Fall Asleep (minutes)",
    "durationtowakeup": "Time to Wake Up (minutes)",
    "out_of_bed_count": "Out of Bed (count)",
    "hr_average": "Average Heart Rate (bpm)",
    "hr_min": "Minimum Heart Rate (bpm)",
    "hr_max": "Maximum Heart Rate (bpm)",
    "rr_average": "Average Respiratory Rate (breaths/min)",
    "rr_min": "Minimum Respiratory Rate (breaths/min)",
    "rr_max": "Maximum Respiratory Rate (breaths/min)",
    "snoring": "Snoring Duration (minutes)",
    "snoringepisodecount": "Snoring Episodes (count)",
    "sleep_score": "Sleep Score",
    "mvt_score_avg": "Average Movement Score",
    "mvt_active_duration": "Movement Duration (minutes)",
    "chest_movement_rate_average": "Average Chest Movement Rate (breaths/min)",
    "chest_movement_rate_min": "Minimum Chest Movement Rate (breaths/min)",
    "chest_movement_rate_max": "Maximum Chest Movement Rate (breaths/min)",
    "breathing_sounds": "Breathing Sounds Intensity",
    "breathing_sounds_episode_count": "Breathing Sounds Episodes (count)",
}

# Epoch metrics as (output column, vendor key). Order decides the reference field.
epoch_metric_fields = (
    ("hr", "hr"),
    ("rr", "rr"),
    ("snoring", "snoring"),
    ("sdnn", "sdnn_1"),
    ("rmssd", "rmssd"),
    ("movement_score", "mvt_score"),
    ("chest_movement_rate", "chest_movement_rate"),
    ("vendor_index", "withings_index"),
    ("breathing_sounds", "breathing_sounds"),
)

epoch_table_columns = (
    "id", "timestamp", "state", "hr", "rr", "snoring", "sdnn", "rmssd",
    "movement_score", "chest_movement_rate", "vendor_index", "breathing_sounds",
)

# Epoch metrics drawn as nightly line charts, in chart order
nightly_chart_metrics = (
    ("hr", "Heart Rate (bpm)"),
    ("rr", "Respiratory Rate (breaths/min)"),
    ("snoring", "Snoring"),
    ("rmssd", "HRV (RMSSD, ms)"),
    ("sdnn", "HRV (SDNN, ms)"),
    ("movement_score", "Movement Score"),
    ("chest_movement_rate", "Chest Movement Rate (breaths/min)"),
    ("breathing_sounds", "Breathing Sounds"),
)

sleep_stage_styles = {
    0: {"name": "Awake", "color": "#808080"},
    1: {"name": "Light", "color": "#a6cee3"},
    2: {"name": "Deep", "color": "#1f78b4"},
    3: {"name": "REM", "color": "#9467bd"},
}

night_event_styles = {
    "1": {"name": "Got in Bed", "color": "#1f77b4"},
    "2": {"name": "Fell Asleep", "color": "#2ca02c"},
    "3": {"name": "Woke Up", "color": "#ff7f0e"},
    "4": {"name": "Got out of Bed", "color": "#d62728"},
}

# Upper bounds (inclusive) for each severity label; the last band is open-ended
ahi_severity_bands = (
    (5, "none/minimal", "green"),
    (15, "mild", "yellow"),
    (30, "moderate", "orange"),
    (None, "severe", "red"),
)

snoring_severity_bands = (
    (0, "none", "green"),
    (15, "mild", "yellow"),
    (30, "moderate", "goldenrod"),
    (60, "heavy", "orange"),
    (None, "severe", "red"),
)

MINUTES_PER_DAY = 1440
NOON_MINUTES = 720
