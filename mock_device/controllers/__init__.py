from mock_device.controllers.smoker_controller import SmokerController

__all__ = [
    'SmokerController',
]
