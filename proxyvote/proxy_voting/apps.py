from django.apps import AppConfig


class ProxyVotingConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'proxy_voting'
    verbose_name = "Proxy voting"
