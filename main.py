"""Main application for the PWSWeather bridge."""

import sys
import logging
import signal
from typing import Optional

from pws_bridge.api import PWSWeatherClient
from pws_bridge.bus import SignalKBus
from pws_bridge.config import ConfigError, ConfigManager
from pws_bridge.plugin import PWSWeatherPlugin
from pws_bridge.scheduling import Scheduler


class WeatherBridgeApp:
    """Runs the PWSWeather plugin against a Signal K server."""

    def __init__(self, config_path: Optional[str] = None) -> None:
        """Initialize the bridge application.

        Args:
            config_path: Path to configuration file (optional)
        """
        self.config: Optional[ConfigManager] = None
        self.scheduler: Optional[Scheduler] = None
        self.bus: Optional[SignalKBus] = None
        self.client: Optional[PWSWeatherClient] = None
        self.plugin: Optional[PWSWeatherPlugin] = None
        self.logger: Optional[logging.Logger] = None

        self._initialize(config_path)

    def _initialize(self, config_path: Optional[str] = None) -> None:
        """Initialize all components."""
        try:
            self.config = ConfigManager(config_path)

            self._setup_logging()
            self.logger = logging.getLogger(__name__)

            signalk_config = self.config.get_signalk_config()
            self.scheduler = Scheduler()
            self.bus = SignalKBus(
                signalk_config.get('url', 'http://localhost:3000'),
                self.scheduler,
                timeout=signalk_config.get('timeout', 10.0),
            )
            self.client = PWSWeatherClient(timeout=self.config.get('pwsweather.timeout'))
            self.plugin = PWSWeatherPlugin(self.bus, self.scheduler, self.client)

            signal.signal(signal.SIGINT, self._signal_handler)
            signal.signal(signal.SIGTERM, self._signal_handler)

            self.logger.info("PWSWeather bridge initialized successfully")

        except (FileNotFoundError, ConfigError) as e:
            print(f"Failed to initialize PWSWeather bridge: {e}")
            sys.exit(1)

    def _setup_logging(self) -> None:
        """Setup logging configuration."""
        log_config = self.config.get_logging_config()

        logging.basicConfig(
            level=getattr(logging, str(log_config.get('level', 'INFO')).upper()),
            format=log_config.get('format', '%(asctime)s - %(name)s - %(levelname)s - %(message)s'),
            handlers=[
                logging.StreamHandler(),
                logging.FileHandler(log_config.get('file', 'pws_bridge.log'))
            ]
        )

    def _signal_handler(self, signum, frame) -> None:
        """Handle shutdown signals."""
        self.logger.info(f"Received signal {signum}, shutting down gracefully...")
        self.scheduler.stop()

    def run_single_cycle(self) -> bool:
        """Bootstrap, read the bus once and submit one report."""
        self.plugin.start(self.config.get_pwsweather_config())
        try:
            self.bus.poll()
            return self.plugin.submit()
        finally:
            self.plugin.stop()

    def run_continuous(self) -> None:
        """Start the plugin and run its tasks until a shutdown signal."""
        options = self.config.get_pwsweather_config()
        self.plugin.start(options)
        self.logger.info(f"Submitting every {options['submit_interval']:g} minutes")

        try:
            self.scheduler.run_forever()
        finally:
            self.plugin.stop()

    def cleanup(self) -> None:
        """Cleanup resources."""
        self.logger.info("Cleaning up resources...")

        if self.client:
            self.client.close()
        if self.bus:
            self.bus.close()

        self.logger.info("PWSWeather bridge shutdown complete")

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.cleanup()


def main():
    """Main entry point."""
    import argparse

    parser = argparse.ArgumentParser(description='PWSWeather Bridge')
    parser.add_argument('--config', '-c', help='Path to configuration file')
    parser.add_argument('--single', '-s', action='store_true',
                       help='Submit a single report instead of running continuously')

    args = parser.parse_args()

    try:
        with WeatherBridgeApp(args.config) as app:
            if args.single:
                success = app.run_single_cycle()
                sys.exit(0 if success else 1)
            else:
                app.run_continuous()

    except ConfigError as e:
        print(f"Configuration error: {e}")
        sys.exit(1)


if __name__ == '__main__':
    main()
