"""
Package the API and deploy it to AWS Lambda.

The service files are zipped, uploaded to the deployment bucket and the Lambda
function is pointed at the uploaded package. Third-party libraries are not
bundled; the function loads them from its Lambda layer.

    python -m scripts.deploy [stage]
"""

import json
import os
import sys
import zipfile
from datetime import datetime
import boto3
from config import config

PACKAGE_MODULES = ['config.py', 'lambda_function.py']
PACKAGE_DIRECTORIES = ['db', 'middlewares', 'models', 'routes', 'utils']
DEV_KEYWORDS = ['dev', 'development', 'test', 'staging']

class ConsoleColors:
    OKGREEN = '\033[92m'
    WARNING = '\033[93m'
    FAIL = '\033[91m'
    DEFAULT = '\033[0m'

def is_possibly_dev_environment() -> bool:
    """Check if the current configuration looks like a development one.

    This can be used to guard against accidental deployments to production.
    """
    candidates = {
        'ENV': config.app.env,
        'LAMBDA_FUNCTION_NAME': config.deployment.lambda_function_name,
        'ZIP_FILE': config.deployment.zip_file,
        'TABLE_PREFIX': config.storage.table_prefix,
    }
    for key, value in candidates.items():
        value = (value or '').lower()
        if any(keyword in value for keyword in DEV_KEYWORDS):
            print(f'Warning: {key} contains a development keyword: {value}')
            return True
    return False

def build_package(zip_file: str, root: str = '.') -> str:
    """Zip the modules and packages the Lambda function needs."""
    with zipfile.ZipFile(zip_file, 'w', zipfile.ZIP_DEFLATED) as archive:
        for module in PACKAGE_MODULES:
            archive.write(os.path.join(root, module), module)
        for directory in PACKAGE_DIRECTORIES:
            for folder, _, files in os.walk(os.path.join(root, directory)):
                if '__pycache__' in folder:
                    continue
                for name in files:
                    if name.endswith('.py'):
                        path = os.path.join(folder, name)
                        archive.write(path, os.path.relpath(path, root))
    return zip_file

def deploy_lambda(stage: str) -> bool:
    """Upload the package to S3 and update the Lambda function to use it."""
    if stage.lower() == 'prod' and is_possibly_dev_environment():
        print(f"{ConsoleColors.WARNING}[WARNING] You are deploying to production with a configuration that may indicate a development environment.{ConsoleColors.DEFAULT}")
        confirmation = input("Do you want to continue? (yes/no): ").strip().lower()
        if confirmation != 'yes':
            print("Deployment cancelled.")
            return False

    zip_file = build_package(config.deployment.zip_file)
    function_name = config.deployment.lambda_function_name
    bucket = config.deployment.deployment_bucket
    print(f'Zip file size: {os.path.getsize(zip_file) / (1024 * 1024):.2f} MB')
    print(f'Deployment folder: {stage}')

    session = boto3.Session(
        aws_access_key_id=config.aws.access_key_id or None,
        aws_secret_access_key=config.aws.secret_access_key or None,
        region_name=config.aws.region
    )
    s3_key = f"{stage}/{function_name}_{datetime.now().strftime('%Y%m%d_%H%M%S')}.zip"
    print(f'Uploading {zip_file} to s3://{bucket}/{s3_key}')
    session.client('s3').upload_file(zip_file, bucket, s3_key)

    print(f'Updating {function_name} with S3 package: s3://{bucket}/{s3_key}')
    response = session.client('lambda').update_function_code(
        FunctionName=function_name,
        S3Bucket=bucket,
        S3Key=s3_key,
        Publish=True
    )
    if response['ResponseMetadata']['HTTPStatusCode'] != 200:
        print(f'{ConsoleColors.FAIL}Error updating {function_name}{ConsoleColors.DEFAULT}')
        print(json.dumps(response, indent=2, default=str))
        return False
    print(f'{ConsoleColors.OKGREEN}{function_name} updated successfully{ConsoleColors.DEFAULT}')
    print(f'Function ARN: {response.get("FunctionArn", "N/A")}')
    print(f'Version: {response.get("Version", "N/A")}')
    return True

if __name__ == '__main__':
    stage = sys.argv[1] if len(sys.argv) > 1 else 'prod'
    sys.exit(0 if deploy_lambda(stage) else 1)
