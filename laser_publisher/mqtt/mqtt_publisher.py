import json
import logging
import threading
from collections import defaultdict
from typing import Any, Callable, Dict, List, Optional, Union

import paho.mqtt.client as mqtt

from ..core.subscription import Subscription

logger = logging.getLogger(__name__)

MessageHandler = Callable[[bytes], None]


class MQTTPublisher:
    """
    A class to handle connecting to an MQTT broker, publishing data and
    dispatching messages of subscribed topics.
    """
    def __init__(self, broker_host: str, broker_port: int = 1883, *, username: Optional[str] = None,
                 password: Optional[str] = None, tls_enabled: bool = False, ca_certs: Optional[str] = None,
                 client_id: str = ""):
        """
        Initializes the MQTT client.
        :param broker_host: The IP address or hostname of the MQTT broker.
        :param broker_port: The port of the MQTT broker (default is 1883).
        """
        self.broker_host = broker_host
        self.broker_port = broker_port
        self.connected = False
        self.client = mqtt.Client(mqtt.CallbackAPIVersion.VERSION2, client_id=client_id)
        self.client.on_connect = self._on_connect
        self.client.on_disconnect = self._on_disconnect
        self.client.on_message = self._on_message

        self._handlers_lock = threading.Lock()
        self._handlers: Dict[str, List[MessageHandler]] = defaultdict(list)
        self._topic_qos: Dict[str, int] = {}

        if username is not None:
            self.client.username_pw_set(username, password)

        if tls_enabled:
            if ca_certs:
                self.client.tls_set(ca_certs=ca_certs)
            else:
                self.client.tls_set()  # default certs

    def _on_connect(self, client, userdata, flags, reason_code, properties):
        """Callback function for when the client connects to the broker."""
        if reason_code.is_failure:
            logger.error("Failed to connect to MQTT broker: %s", reason_code)
            return
        self.connected = True
        logger.info("Connected to MQTT broker %s:%d", self.broker_host, self.broker_port)
        # Subscriptions do not survive a reconnect with a clean session
        with self._handlers_lock:
            topics = dict(self._topic_qos)
        for topic, qos in topics.items():
            client.subscribe(topic, qos)

    def _on_disconnect(self, client, userdata, disconnect_flags, reason_code, properties):
        self.connected = False
        if reason_code.is_failure:
            logger.warning("Unexpected MQTT disconnection: %s", reason_code)
        else:
            logger.info("Disconnected from MQTT broker")

    def _on_message(self, client, userdata, message):
        with self._handlers_lock:
            handlers = list(self._handlers.get(message.topic, ()))
        for handler in handlers:
            try:
                handler(message.payload)
            except Exception:
                logger.exception("Handler for topic %s failed", message.topic)

    def connect(self, keepalive: int = 60) -> bool:
        """
        Connects to the MQTT broker and starts the network loop.
        Returns True on success, False on failure.
        """
        try:
            logger.info("Connecting to MQTT broker at %s:%d...", self.broker_host, self.broker_port)
            self.client.connect(self.broker_host, self.broker_port, keepalive)
            self.client.loop_start()  # Starts a background thread for the network loop
            return True
        except (OSError, ValueError) as e:
            logger.error("Could not connect to MQTT broker: %s", e)
            return False

    def publish(self, topic: str, payload: Union[Dict[str, Any], str], qos: int = 0, retain: bool = False) -> bool:
        """
        Publishes a payload to a specific topic.
        - If payload is a dict, it will be converted to JSON string.
        - If payload is a string, it will be sent as-is.
        """
        data_to_send = json.dumps(payload) if isinstance(payload, dict) else str(payload)
        try:
            result = self.client.publish(topic, data_to_send, qos=qos, retain=retain)
        except (OSError, ValueError) as e:
            logger.error("An error occurred during publishing to %s: %s", topic, e)
            return False
        if result.rc != mqtt.MQTT_ERR_SUCCESS:
            logger.warning("Failed to publish message to topic %s: %s", topic, mqtt.error_string(result.rc))
            return False
        return True

    def subscribe(self, topic: str, handler: MessageHandler, qos: int = 0) -> Subscription:
        """
        Calls handler with the raw payload of every message on topic, from the
        network thread. Cancel the returned subscription to stop.
        """
        with self._handlers_lock:
            first = not self._handlers[topic]
            self._handlers[topic].append(handler)
            self._topic_qos[topic] = qos
        if first and self.connected:
            self.client.subscribe(topic, qos)
        return Subscription(topic, lambda: self._remove_handler(topic, handler))

    def _remove_handler(self, topic: str, handler: MessageHandler):
        with self._handlers_lock:
            handlers = self._handlers.get(topic, [])
            if handler in handlers:
                handlers.remove(handler)
            last = not handlers
            if last:
                self._handlers.pop(topic, None)
                self._topic_qos.pop(topic, None)
        if last and self.connected:
            self.client.unsubscribe(topic)

    def disconnect(self):
        """Stops the network loop and disconnects from the broker."""
        logger.info("Disconnecting from MQTT broker...")
        self.client.disconnect()
        self.client.loop_stop()
        self.connected = False
