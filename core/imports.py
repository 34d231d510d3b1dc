from flask import Flask, request, jsonify, Blueprint, current_app, send_file, send_from_directory
from flask_jwt_extended import create_access_token, get_jwt_identity, JWTManager, get_jwt, decode_token, verify_jwt_in_request
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy.exc import SQLAlchemyError
from flask_migrate import Migrate
from sqlalchemy import func, or_
from flask_bcrypt import Bcrypt
from flasgger import Swagger
from flask_cors import CORS
from flask_socketio import SocketIO, emit, join_room
from datetime import datetime, timedelta, timezone
import uuid
import os
import json
from io import BytesIO
