import logging

from prometheus_client import Gauge, Counter, Histogram, start_http_server

logger = logging.getLogger(__name__)

# Frames analizados
frames_processed_total = Counter(
    "frames_processed_total",
    "Frames analizados por el worker",
)

# Frames descartados por estar ocupado (keep-latest)
frames_dropped_total = Counter(
    "frames_dropped_total",
    "Frames descartados porque otro frame estaba en proceso",
)

# Latencia del detector sobre el frame completo
detector_latency = Gauge(
    "detector_latency_seconds",
    "Tiempo del detector de texto sobre el frame completo",
)

# Pasos usados por la búsqueda ROI
zoom_steps = Histogram(
    "zoom_steps",
    "Pasos de la búsqueda ROI por frame",
    buckets=(1, 2, 3, 4, 5, 6, 8, 10),
)

# Solicitudes de confirmación
prompts_raised_total = Counter(
    "prompts_raised_total",
    "Solicitudes de confirmación emitidas",
    ["track"]
)

# Placas confirmadas
plates_confirmed_total = Counter(
    "plates_confirmed_total",
    "Placas confirmadas por el operador",
)

# Tamaño del registro
registry_size = Gauge(
    "registry_size",
    "Placas en el registro de la sesión",
)

# Latencia total pipeline
pipeline_latency = Gauge(
    "pipeline_latency_seconds",
    "Tiempo total de procesamiento de frame",
)

def start_metrics_server(port: int = 9100):
    """Arranca servidor de métricas Prometheus."""
    start_http_server(port)
    logger.info(f"📊 Prometheus metrics disponible en :{port}")
