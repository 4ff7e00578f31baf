import os
import json
from jobboard_scraper.models.heartbeat_models import VersionInfo

def load_app_version_info():
    ## File path of version.json for the app is the package root, ../version.json
    utils_dir = os.path.dirname(os.path.abspath(__file__))
    package_dir = os.path.abspath(os.path.join(utils_dir, os.pardir))
    file_path = os.path.join(package_dir, 'version.json')

    with open(file_path) as json_file:
        data = json.load(json_file)

    return VersionInfo(**data)

APP_VERSION_INFO = load_app_version_info()
