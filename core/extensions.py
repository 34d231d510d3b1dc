from core.imports import Bcrypt, Swagger, JWTManager, SQLAlchemy, CORS, Migrate, SocketIO

jwt = JWTManager()
db = SQLAlchemy()
migrate = Migrate()
swagger = Swagger()
cors = CORS()
bcrypt = Bcrypt()
socketio = SocketIO(cors_allowed_origins="*")
