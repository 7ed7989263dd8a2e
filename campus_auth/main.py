from .core.app_factory import create_app
from .core.monitoring import init_monitoring

init_monitoring()

app = create_app()
