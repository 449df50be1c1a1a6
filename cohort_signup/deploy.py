import logging
import os
import shutil
import subprocess
import sys
import tempfile
import zipfile

import boto3
import requests

logger = logging.getLogger(__name__)

PACKAGE_DIR = os.path.dirname(os.path.abspath(__file__))

# boto3 ships with the Lambda runtime
RUNTIME_REQUIREMENTS = ['requests']

DEFAULT_RUNTIME = 'python3.12'
DEFAULT_HANDLERS = {
    'register': 'cohort_signup.registration.handler.lambda_handler',
    'webhook': 'cohort_signup.payments.webhook.lambda_handler',
}


def get_client(service, options):
    session_args = {}
    if 'aws_profile_name' in options:
        session_args['profile_name'] = options['aws_profile_name']
    if 'aws_region_name' in options:
        session_args['region_name'] = options['aws_region_name']
    return boto3.Session(**session_args).client(service)


def package_lambda(function_name, requirements=None, build_root=None):
    """Zips the cohort_signup package and its runtime dependencies."""
    if requirements is None:
        requirements = RUNTIME_REQUIREMENTS
    build_root = build_root or tempfile.gettempdir()
    build_dir = os.path.join(build_root, f'{function_name}-build')
    shutil.rmtree(build_dir, ignore_errors=True)
    shutil.copytree(PACKAGE_DIR, os.path.join(build_dir, 'cohort_signup'),
                    ignore=shutil.ignore_patterns('__pycache__', '*.pyc'))

    if requirements:
        logger.info("Installing %s into %s", ', '.join(requirements), build_dir)
        subprocess.check_call([sys.executable, '-m', 'pip', 'install',
                               '--quiet', '-t', build_dir, *requirements])

    zip_path = os.path.join(build_root, f'{function_name}.zip')
    with zipfile.ZipFile(zip_path, 'w', zipfile.ZIP_DEFLATED) as zf:
        for root, _, files in os.walk(build_dir):
            for file in files:
                path = os.path.join(root, file)
                zf.write(path, os.path.relpath(path, build_dir))

    logger.info("Packaged %s: %s", function_name, zip_path)
    return zip_path


def function_environment(function_details, settings):
    variables = {
        'NOTION_SECRET': settings.notion_secret,
        'NOTION_DB_ID': settings.notion_db_id,
        'COHORT_CAPACITY': str(settings.capacity),
        'STRIPE_DASHBOARD_URL': settings.stripe_dashboard_url,
    }
    variables.update(function_details.get('environment') or {})
    return {'Variables': variables}


def deploy_lambda(zip_path, function_details, options, settings, dry_run=False,
                  lambda_client=None):
    """Updates the function's code and environment, creating it if it does not exist."""
    function_name = function_details['name']
    if dry_run:
        logger.info("Dry run: not deploying %s", function_name)
        return 'skipped'

    lambda_client = lambda_client or get_client('lambda', options)
    with open(zip_path, 'rb') as f:
        zipped_code = f.read()
    environment = function_environment(function_details, settings)

    try:
        lambda_client.update_function_code(FunctionName=function_name,
                                           ZipFile=zipped_code)
        waiter = lambda_client.get_waiter('function_updated')
        waiter.wait(FunctionName=function_name)
        lambda_client.update_function_configuration(FunctionName=function_name,
                                                    Environment=environment)
        logger.info("Updated Lambda function %s", function_name)
        return 'updated'
    except lambda_client.exceptions.ResourceNotFoundException:
        logger.info("Lambda function %s not found, creating it", function_name)
        handler = (function_details.get('handler')
                   or DEFAULT_HANDLERS.get(function_details.get('endpoint')))
        lambda_client.create_function(
            FunctionName=function_name,
            Runtime=function_details.get('runtime', DEFAULT_RUNTIME),
            Role=function_details['role'],
            Handler=handler,
            Code={'ZipFile': zipped_code},
            Environment=environment,
        )
        return 'created'


def check_endpoints(endpoints, http_get=requests.get):
    """
    Smoke-tests deployed endpoints. A 200, or a 405 from a POST-only
    endpoint, shows the function is reachable. Returns the failure count.
    """
    failures = 0
    for endpoint in endpoints:
        try:
            response = http_get(endpoint, timeout=10)
        except requests.exceptions.RequestException as e:
            logger.error("ERROR: %s (%s)", endpoint, e)
            failures += 1
            continue
        if response.status_code in (200, 405):
            logger.info("SUCCESS: %s (%s)", endpoint, response.status_code)
        else:
            logger.error("FAILURE: %s (%s)", endpoint, response.status_code)
            failures += 1
    return failures
