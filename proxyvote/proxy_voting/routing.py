from django.urls import re_path
from . import consumers

websocket_urlpatterns = [
    # ws://your-site.com/ws/results/
    re_path(r'ws/results/$', consumers.ResultsConsumer.as_asgi()),
]
