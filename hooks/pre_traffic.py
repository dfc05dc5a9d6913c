import json
import boto3
import os
import logging

logger = logging.getLogger()
logger.setLevel(logging.INFO)

codedeploy = boto3.client('codedeploy')
lambda_client = boto3.client('lambda')

# Requests that must be rejected before the provider is ever called
SMOKE_TESTS = [
    (
        'GET is rejected',
        {'httpMethod': 'GET', 'path': '/api/send-email', 'body': None},
        405,
    ),
    (
        'POST without html is rejected',
        {'httpMethod': 'POST', 'path': '/api/send-email', 'body': json.dumps({'subject': 'smoke test'})},
        400,
    ),
]


def _invoke(target_function, test_event):
    response = lambda_client.invoke(
        FunctionName=target_function,
        InvocationType='RequestResponse',
        Payload=json.dumps(test_event)
    )

    response_payload = json.loads(response['Payload'].read())
    logger.info(f"Test response: {json.dumps(response_payload)}")

    if response.get('FunctionError'):
        raise Exception(f"Function returned error: {response_payload}")

    if response.get('StatusCode') != 200:
        raise Exception(f"Unexpected status code: {response.get('StatusCode')}")

    return response_payload


def lambda_handler(event, context):
    """
    Pre-traffic hook for CodeDeploy.
    Smoke-tests the new relay version before shifting traffic to it.
    """
    logger.info(f"Pre-traffic hook triggered: {json.dumps(event)}")

    deployment_id = event['DeploymentId']
    lifecycle_event_hook_execution_id = event['LifecycleEventHookExecutionId']

    try:
        target_function = os.environ.get('TARGET_FUNCTION')
        logger.info(f"Running smoke tests on {target_function}")

        for name, test_event, expected_status in SMOKE_TESTS:
            response_payload = _invoke(target_function, test_event)
            if response_payload.get('statusCode') != expected_status:
                raise Exception(
                    f"{name}: expected status {expected_status}, "
                    f"got {response_payload.get('statusCode')}"
                )
            logger.info(f"Smoke test passed: {name}")

        logger.info("Pre-traffic validation passed")

        codedeploy.put_lifecycle_event_hook_execution_status(
            deploymentId=deployment_id,
            lifecycleEventHookExecutionId=lifecycle_event_hook_execution_id,
            status='Succeeded'
        )

        return {
            'statusCode': 200,
            'body': json.dumps('Pre-traffic validation succeeded')
        }

    except Exception as e:
        logger.error(f"Pre-traffic validation failed: {str(e)}", exc_info=True)

        # Report failure - this will prevent deployment
        codedeploy.put_lifecycle_event_hook_execution_status(
            deploymentId=deployment_id,
            lifecycleEventHookExecutionId=lifecycle_event_hook_execution_id,
            status='Failed'
        )

        return {
            'statusCode': 500,
            'body': json.dumps(f'Pre-traffic validation failed: {str(e)}')
        }
