from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_name: str = "Thermostat"
    timezone: str = "America/Chicago"

    # Logging
    log_file: str = "thermostat.log"

    # Storage (config snapshots only, no event history)
    sqlite_path: str = Field(default="thermostat.db")

    # In-memory event log
    event_log_capacity: int = 60

    # Actuator: "sim" for development, "gpio" on the Pi
    actuator_mode: str = Field(default="sim")
    gpio_heat_pin: int = 16
    gpio_cool_pin: int = 20
    gpio_fan_pin: int = 21
    fan_cooldown_seconds: float = 60.0

    # Thermometer: "sim", "web", "rs485" or "i2c"
    thermometer_mode: str = "sim"
    thermometer_endpoint: str = ""          # empty => look it up over mDNS
    thermometer_service: str = "thermometer"
    thermometer_timeout_seconds: float = 5.0
    mdns_timeout_seconds: float = 3.0

    # RS485 / Modbus RTU
    rs485_port: str = "/dev/ttyUSB0"      # Windows example: "COM3"
    rs485_baudrate: int = 9600
    rs485_slave_id: int = 1

    # I2C (MCP9808)
    i2c_bus: int = 1
    i2c_address: int = 0x18

    # Temperature register definition
    temp_functioncode: int = 4             # 3=holding, 4=input
    temp_register_address: int = 1
    temp_scale: float = 0.1
    temp_units: str = "Celsius"

    # HTTP
    cors_origins: list[str] = ["*"]


settings = Settings()
