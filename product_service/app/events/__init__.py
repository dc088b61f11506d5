"""
Events module for the Product Service.

Producers:
    - ProductEventProducer: publishes ``product.deleted`` with the product's
      media ids so the media service can cascade the deletion.

Consumers:
    - UserDeletedHandler: on ``user.deleted`` tombstones the owner, deletes
      every product it owns and re-emits ``product.deleted`` for each.
    - ProductEventConsumer: wires the handlers onto the Kafka subscriber.
"""
