# --- Configuration Constants ---
DEFAULT_FPS = 60
DEFAULT_RESOLUTION = (1280, 720)
SAMPLE_RATE = 44100

# Analyser settings
FFT_SIZE = 2048
BUFFER_SIZE = 1024  # Maximum number of frequency bins (FFT_SIZE / 2)
ANALYSER_SMOOTHING = 0.5  # 0.0 = raw spectrum, 1.0 = frozen
MIN_DECIBELS = -100
MAX_DECIBELS = -30
DEFAULT_VOLUME = 0.2

# Particle motion
VELOCITY_STEP = 0.03  # Velocity added for a full-scale (255) magnitude
VELOCITY_LIMIT = 5  # Velocity resets to zero once it goes past this

# Rendering
TUNING_VALUE = 1.1**3
MAX_RADIUS = 25
TRAIL_ALPHA = 0.9  # Opacity of the black fade painted every frame
PARTICLE_ALPHA = 0.8
AMPLITUDE_REACH = 200  # Extra orbit distance for a full-scale amplitude
