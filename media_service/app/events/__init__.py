"""
Events module for the Media Service.

Consumers:
    - UserDeletedHandler: on ``user.deleted`` tombstones the owner and deletes
      all of its media.
    - ProductDeletedHandler: on ``product.deleted`` deletes the product's media.
    - MediaEventConsumer: wires both handlers onto the Kafka subscriber.
"""
