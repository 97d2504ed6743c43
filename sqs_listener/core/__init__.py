SERVICE_NAME = "sqs_listener"
