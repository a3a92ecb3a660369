from gevent import monkey
monkey.patch_all()

from gevent.pywsgi import WSGIServer
from geventwebsocket.handler import WebSocketHandler
from sphereplay.app import create_app
from sphereplay.config import Config

app = create_app()

if __name__ == '__main__':
    http_server = WSGIServer((Config.HOST, Config.PORT), app, handler_class=WebSocketHandler)
    http_server.serve_forever()
