from pathlib import Path

import deployment

LOCAL_BLOCKCHAIN_ENVIRONMENTS = ["local"]
DEPLOYMENT_DIR = Path(deployment.__file__).parent
CONSTRUCTOR_PARAMS_DIR = DEPLOYMENT_DIR / "constructor_params"
ARTIFACTS_DIR = DEPLOYMENT_DIR / "artifacts"
VARIABLE_PREFIX = "$"
SPECIAL_VARIABLE_DELIMITER = ":"
DEPLOYER_INDICATOR = "deployer"
NOW_INDICATOR = "now"
