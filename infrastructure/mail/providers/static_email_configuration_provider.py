"""内存配置提供者"""

from domain.mail.services.email_configuration_provider import EmailConfigurationProvider
from domain.mail.value_objects.client_configuration import ClientConfiguration


class StaticEmailConfigurationProvider(EmailConfigurationProvider):
    """返回构造时传入的配置"""

    def __init__(self, configuration: ClientConfiguration):
        self._configuration = configuration

    async def get_configuration(self) -> ClientConfiguration:
        return self._configuration
